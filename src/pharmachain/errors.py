"""Exception types raised inside the verification engine."""


class PharmaChainError(Exception):
    """Base class for engine errors."""


class TransportError(PharmaChainError):
    """A registry or ledger service could not be reached or answered garbage.

    Always recovered inside the providers; never surfaces from verify().
    """


class NotInitialized(PharmaChainError):
    """Batch registration attempted without a connected ledger."""


class MalformedInput(PharmaChainError):
    """Caller-supplied payload failed validation."""
