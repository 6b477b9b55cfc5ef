from __future__ import annotations


class WorkerError(Exception):
    """Base class for errors raised by the signal worker."""


class DataAccessError(WorkerError):
    """A query against the database failed (connection or statement error)."""


class MissingTableError(DataAccessError):
    """A table this worker reads but does not own is absent."""


class BadPayloadError(WorkerError):
    """A job payload could not be decoded. The job is dropped, never retried."""


class MissingRecordError(WorkerError):
    """A record referenced by a job (task or user) does not exist."""


class DeliveryError(WorkerError):
    """The outbound mail channel refused or failed to take a message."""


class TransientDeliveryError(DeliveryError):
    """Delivery failed for a reason that may clear up (timeout, 5xx, rate limit)."""


class PermanentDeliveryError(DeliveryError):
    """Delivery failed in a way a retry will not fix (bad request, auth, rejected recipient)."""
