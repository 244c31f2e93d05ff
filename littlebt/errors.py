"""
Storage error taxonomy.

Absence of a row or table is not an error and never raises. Everything
else the backing store reports surfaces as a StoreError subclass; whether
that ends the process is decided by the caller (see
littlebt.error_mitigation.fail_fast).
"""


class StoreError(Exception):
    """Base class for storage failures"""


class PersistenceError(StoreError):
    """The backing database rejected or failed a statement"""

    def __init__(self, operation: str, target: str, cause: BaseException):
        self.operation = operation
        self.target = target
        self.cause = cause
        super().__init__(f"{operation} for {target} failed: {cause}")


class CodecError(StoreError):
    """A value could not be serialized"""


class CorruptPayloadError(CodecError):
    """A stored payload does not match the expected layout"""
