import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from endfield.auth import SessionCredential
from endfield.constants import (
    ATTENDANCE_PATH,
    ATTENDANCE_URL,
    BINDING_PATH,
    BINDING_URL,
    ENDFIELD_APP_CODE,
    ENDFIELD_GAME_ID,
    GAME_ORIGIN,
    PLATFORM,
    USER_AGENT,
    VNAME,
)
from endfield.errors import ClaimFailed, NoBindingError, NoRolesError, RoleResolutionError, TransportError
from endfield.signing import compute_sign
from endfield.transport import Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Role:
    game_role: str
    nickname: str
    level: int
    server_name: str
    server_id: str
    role_id: str

    @property
    def label(self) -> str:
        return f"{self.nickname} (Lv.{self.level}) [{self.server_name}]"


@dataclass(frozen=True)
class Reward:
    name: str
    count: int

    def __str__(self) -> str:
        return f"{self.name} x{self.count}"


@dataclass(frozen=True)
class AlreadyClaimed:
    total_sign_ins: int = 0


@dataclass(frozen=True)
class ClaimedWithRewards:
    rewards: List[Reward] = field(default_factory=list)


@dataclass(frozen=True)
class ClaimedNoRewards:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


ClaimOutcome = Union[AlreadyClaimed, ClaimedWithRewards, ClaimedNoRewards, Failed]


def game_role_id(role_id: str, server_id: str) -> str:
    return f"{ENDFIELD_GAME_ID}_{role_id}_{server_id}"


def parse_rewards(data: Dict[str, Any]) -> List[Reward]:
    """
    Resolve ``awardIds`` against ``resourceInfoMap``; unknown ids are skipped.
    """
    rewards = []
    resource_map = data.get("resourceInfoMap") or {}
    for award in data.get("awardIds") or []:
        award_id = award.get("id") if isinstance(award, dict) else award
        if award_id is None:
            continue
        resource = resource_map.get(str(award_id)) or resource_map.get(award_id)
        if isinstance(resource, dict) and resource.get("name") is not None:
            rewards.append(Reward(name=resource["name"], count=resource.get("count", 0)))
    return rewards


class EndfieldAdapter:
    """
    Signed calls to the SKPort Endfield API for one session.

    Every request gets its own timestamp and signature, computed from the
    path of the endpoint being called and the session secret.
    """

    def __init__(
        self,
        transport: Transport,
        credential: SessionCredential,
        language: str = "en",
        clock: Callable[[], float] = time.time,
    ):
        self.transport = transport
        self.credential = credential
        self.language = language
        self.clock = clock

    def build_headers(self, path: str, game_role: Optional[str] = None) -> Dict[str, str]:
        """
        Build the headers of one signed request

        Args:
            path: Endpoint path the signature is bound to
            game_role: ``sk-game-role`` value for role-scoped requests
        """
        timestamp = str(int(self.clock()))
        headers = {
            "accept": "application/json, text/plain, */*",
            "content-type": "application/json",
            "origin": GAME_ORIGIN,
            "referer": f"{GAME_ORIGIN}/",
            "cred": self.credential.cred,
            "platform": PLATFORM,
            "sk-language": self.language,
            "timestamp": timestamp,
            "vname": VNAME,
            "User-Agent": USER_AGENT,
        }

        signature = compute_sign(path, timestamp, self.credential.secret)
        if signature:
            headers["sign"] = signature
        else:
            # Unsigned fallback; protected endpoints are expected to reject it.
            logger.warning(f"No secret available, sending unsigned request to {path}")

        if game_role:
            headers["sk-game-role"] = game_role
        return headers

    def list_roles(self) -> List[Role]:
        """
        Get every Endfield role bound to the account

        Returns:
            Roles of all bindings, in response order
        """
        try:
            data = self.transport.request("GET", BINDING_URL, headers=self.build_headers(BINDING_PATH)).body
        except TransportError as e:
            raise RoleResolutionError(f"Binding request failed: {e}") from e

        if data.get("code") != 0:
            raise RoleResolutionError(data.get("message") or f"Binding API error: {data.get('code')}")

        apps = (data.get("data") or {}).get("list") or []
        endfield_app = next((app for app in apps if app.get("appCode") == ENDFIELD_APP_CODE), None)
        if not endfield_app or not endfield_app.get("bindingList"):
            raise NoBindingError()

        roles = []
        for binding in endfield_app["bindingList"]:
            for role in binding.get("roles") or []:
                roles.append(Role(
                    game_role=game_role_id(role.get("roleId"), role.get("serverId")),
                    nickname=role.get("nickname", ""),
                    level=role.get("level", 0),
                    server_name=role.get("serverName", ""),
                    server_id=str(role.get("serverId", "")),
                    role_id=str(role.get("roleId", "")),
                ))

        if not roles:
            raise NoRolesError()

        logger.debug(f"✓ {len(roles)} role(s): {', '.join(r.game_role for r in roles)}")
        return roles

    def _attendance(self, method: str, role: Role) -> Dict[str, Any]:
        headers = self.build_headers(ATTENDANCE_PATH, role.game_role)
        try:
            data = self.transport.request(method, ATTENDANCE_URL, headers=headers).body
        except TransportError as e:
            raise ClaimFailed(str(e)) from e

        logger.debug(f"{method} attendance response: {json.dumps(data, ensure_ascii=False)}")
        return data

    def check_attendance(self, role: Role) -> Dict[str, Any]:
        """
        Check attendance status

        Returns:
            ``data`` object of the response (``hasToday``, ``records``, ...)
        """
        data = self._attendance("GET", role)
        if data.get("code") != 0:
            raise ClaimFailed(data.get("message") or f"Attendance status check failed: {data.get('code')}")
        return data.get("data") or {}

    def claim_attendance(self, role: Role) -> List[Reward]:
        """
        Claim attendance reward (POST without body)

        Returns:
            Rewards granted by the claim
        """
        data = self._attendance("POST", role)
        if data.get("code") != 0:
            raise ClaimFailed(data.get("message") or f"Claim failed: {data.get('code')}")
        return parse_rewards(data.get("data") or {})

    def claim_for_role(self, role: Role) -> ClaimOutcome:
        status = self.check_attendance(role)
        if status.get("hasToday"):
            return AlreadyClaimed(total_sign_ins=len(status.get("records") or []))

        rewards = self.claim_attendance(role)
        if rewards:
            logger.debug(f"✅ Attendance claimed for {role.game_role}: {', '.join(map(str, rewards))}")
            return ClaimedWithRewards(rewards=rewards)
        return ClaimedNoRewards()
