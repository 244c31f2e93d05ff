from littlebt.error_mitigation.fail_fast import FailFastProxy, fail_fast

__all__ = ["FailFastProxy", "fail_fast"]
