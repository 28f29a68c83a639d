import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from endfield.adapter import (
    AlreadyClaimed,
    ClaimedWithRewards,
    ClaimOutcome,
    EndfieldAdapter,
    Failed,
    Role,
)
from endfield.auth import CredentialExchanger
from endfield.config import CredentialSource
from endfield.errors import ClaimFailed, HandshakeError, RoleResolutionError
from endfield.report import RunReport
from endfield.transport import Throttle, Transport

logger = logging.getLogger(__name__)

ROLE_DELAY = 0.5
ACCOUNT_DELAY = 1.0


@dataclass
class AccountResult:
    index: int
    roles: List[Tuple[Role, ClaimOutcome]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and not any(isinstance(o, Failed) for _, o in self.roles)


def describe(outcome: ClaimOutcome) -> str:
    if isinstance(outcome, AlreadyClaimed):
        return "Already checked in today"
    if isinstance(outcome, ClaimedWithRewards):
        return f"Checked in! Rewards: {', '.join(map(str, outcome.rewards))}"
    if isinstance(outcome, Failed):
        return outcome.reason
    return "Successfully checked in!"


class CheckinRunner:
    """
    Runs the daily check-in for every configured account, one after another.

    Per account: session credential → roles → claim per role. Account level
    failures skip the account, role level failures skip the role; both end
    up as error entries in the report.
    """

    def __init__(
        self,
        transport: Transport,
        report: Optional[RunReport] = None,
        language: str = "en",
        role_delay: float = ROLE_DELAY,
        account_delay: float = ACCOUNT_DELAY,
        throttle: Optional[Throttle] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.transport = transport
        self.report = report if report is not None else RunReport()
        self.language = language
        self.role_delay = role_delay
        self.account_delay = account_delay
        self.throttle = throttle or Throttle()
        self.clock = clock
        self.exchanger = CredentialExchanger(transport, clock=clock)

    def claim_role(self, adapter: EndfieldAdapter, role: Role) -> ClaimOutcome:
        self.throttle.space("role", self.role_delay)
        try:
            outcome = adapter.claim_for_role(role)
        except ClaimFailed as e:
            outcome = Failed(e.message)
        except Exception as e:
            logger.exception(f"Unexpected error while checking in {role.game_role}")
            outcome = Failed(f"Unexpected error: {e}")
        finally:
            self.throttle.touch("role")

        line = f"  → {role.label}: {describe(outcome)}"
        if isinstance(outcome, Failed):
            self.report.error(line)
        else:
            self.report.info(line)
        return outcome

    def process_account(self, index: int, source: CredentialSource) -> AccountResult:
        """
        Check in every role of one account

        Args:
            index: 1-based account number used in report lines
            source: Strategy producing the session credential
        """
        result = AccountResult(index=index)
        self.report.debug(f"----- CHECKING IN FOR ACCOUNT {index} -----")

        try:
            credential = source.session(self.exchanger)
            self.report.info(f"Account {index}: obtained cred and salt")

            adapter = EndfieldAdapter(self.transport, credential, language=self.language, clock=self.clock)
            roles = adapter.list_roles()
            self.report.info(f"Account {index}: Found {len(roles)} role(s)")
        except (HandshakeError, RoleResolutionError) as e:
            result.error = str(e)
            self.report.error(f"Account {index}: {e}")
            return result
        except Exception as e:
            logger.exception(f"Unexpected error while preparing account {index}")
            result.error = f"Unexpected error: {e}"
            self.report.error(f"Account {index}: {result.error}")
            return result

        for role in roles:
            result.roles.append((role, self.claim_role(adapter, role)))
        return result

    def run(self, sources: Sequence[CredentialSource]) -> List[AccountResult]:
        results = []
        for index, source in enumerate(sources, start=1):
            self.throttle.space("account", self.account_delay)
            try:
                results.append(self.process_account(index, source))
            finally:
                self.throttle.touch("account")

        failed = sum(1 for r in results if not r.success)
        logger.info(f"Processed {len(results)} account(s), {failed} with errors")
        return results
