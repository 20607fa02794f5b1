"""Block lifecycle protocols: apply, adopt, remove and auto-map."""

from lindy.protocols.adopt import AdoptDone, AdoptFailed, AdoptionProtocol
from lindy.protocols.apply import (
    ApplyAdoptionOffered,
    ApplyDone,
    ApplyFailed,
    ApplyProtocol,
    ApplyRejected,
)
from lindy.protocols.automap import AutoMapFailed, AutoMapOrchestrator, AutoMapSucceeded
from lindy.protocols.remove import (
    RemovalBusyRetryOffered,
    RemovalDone,
    RemovalFailed,
    RemovalProtocol,
    RemovalRejected,
)

__all__ = [
    "AdoptDone",
    "AdoptFailed",
    "AdoptionProtocol",
    "ApplyAdoptionOffered",
    "ApplyDone",
    "ApplyFailed",
    "ApplyProtocol",
    "ApplyRejected",
    "AutoMapFailed",
    "AutoMapOrchestrator",
    "AutoMapSucceeded",
    "RemovalBusyRetryOffered",
    "RemovalDone",
    "RemovalFailed",
    "RemovalProtocol",
    "RemovalRejected",
]
