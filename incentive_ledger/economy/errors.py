class IncentiveError(Exception):
    code = "E_INCENTIVE"


class IncentiveNotFoundError(IncentiveError):
    code = "E_NOT_FOUND"

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class RewardUnavailableError(IncentiveError):
    code = "E_REWARD_UNAVAILABLE"


class InsufficientPointsError(IncentiveError):
    code = "E_INSUFFICIENT_POINTS"

    def __init__(self, *, balance: int, required: int) -> None:
        super().__init__(f"balance {balance} is below required {required}")
        self.balance = balance
        self.required = required


class ChallengeNotActiveError(IncentiveError):
    code = "E_CHALLENGE_NOT_ACTIVE"


class AlreadyJoinedError(IncentiveError):
    code = "E_ALREADY_JOINED"


class InvalidStatusTransitionError(IncentiveError):
    code = "E_INVALID_STATUS_TRANSITION"

    def __init__(self, *, current: str, target: str) -> None:
        super().__init__(f"cannot move from {current} to {target}")
        self.current = current
        self.target = target


class LedgerStorageError(IncentiveError):
    code = "E_STORAGE_FAILURE"
