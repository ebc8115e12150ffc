"""
Client-side request routing.

Decides whether a line typed by a user is a creation, an update or a
tracking lookup before it is sent over a carrier.
"""

from dataclasses import dataclass

CREATE = "CREATE"
UPDATE = "UPDATE"
TRACK = "TRACK"

UPDATE_KEYWORDS = {
    "shipped",
    "delayed",
    "location",
    "noteadded",
    "lost",
    "canceled",
    "delivered",
}


@dataclass(frozen=True)
class ClientRequest:
    kind: str
    data: str

    def to_wire(self) -> str:
        """CREATE:/UPDATE:/TRACK: envelope used by the file-exchange carrier."""
        return f"{self.kind}:{self.data}"


def _route_simulation_line(line: str) -> ClientRequest:
    parts = [part.strip() for part in line.split(",")]
    if len(parts) < 3:
        raise ValueError("Invalid simulation format")

    keyword = parts[0].lower()
    shipment_id = parts[1]

    if keyword == "created":
        if len(parts) < 4:
            raise ValueError(
                "Created events require format: created,shipmentId,shipmentType,timestamp"
            )
        return ClientRequest(CREATE, ",".join(parts[:4]))

    if keyword in UPDATE_KEYWORDS:
        return ClientRequest(UPDATE, ",".join([keyword] + parts[1:]))

    return ClientRequest(TRACK, shipment_id)


def route_input(user_input: str) -> ClientRequest:
    """
    Classify raw user input.

    Comma-separated lines are simulation events; otherwise explicit
    CREATE:/UPDATE:/TRACK: prefixes apply and bare text is a shipment id.

    Raises:
        ValueError: For malformed simulation lines
    """
    text = user_input.strip()

    for prefix in (CREATE, UPDATE, TRACK):
        marker = f"{prefix}:"
        if text.startswith(marker):
            return ClientRequest(prefix, text[len(marker):].strip())

    if "," in text:
        return _route_simulation_line(text)

    return ClientRequest(TRACK, text)
