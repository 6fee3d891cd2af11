"""Preference Profile Builder — synthesizes the user's preference profile from rated houses.

Invariants:
    - Input = project requirements + every rated entry (house excerpt ≤ 500 chars)
    - On oracle absence, timeout, or failure the profile keeps its previous value
    - build_profile never raises for oracle problems: profile staleness never blocks a round
    - Writes only Project.profile; no commit (controller owns the unit of work)
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from fango.core.errors import OracleUnavailableError
from fango.core.format_prompts import PROFILE_SYSTEM_PROMPT, build_profile_prompt
from fango.core.oracle_protocols import TextOracle
from fango.models.project import Project
from fango.services.round_ledger import RoundLedger

logger = logging.getLogger(__name__)


class PreferenceProfileBuilder:
    """Assembles profile context, calls the language oracle, stores the result."""

    def __init__(
        self,
        db: AsyncSession,
        text_oracle: TextOracle | None,
        timeout_seconds: float | None = None,
    ):
        self.db = db
        self.text_oracle = text_oracle
        self.timeout_seconds = timeout_seconds

    async def build_profile(self, project: Project) -> str | None:
        """Regenerate project.profile. Returns the (possibly unchanged) profile."""
        log_extra = {"project_id": str(project.id)}
        if self.text_oracle is None:
            logger.info("Language oracle not configured, profile unchanged", extra=log_extra)
            return project.profile

        rated = await RoundLedger(self.db).rated_history(project.id)
        if not rated:
            return project.profile

        prompt = build_profile_prompt(project.requirements, rated)
        try:
            profile = await asyncio.wait_for(
                self.text_oracle.complete(system=PROFILE_SYSTEM_PROMPT, prompt=prompt),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Profile synthesis timed out, keeping previous profile", extra=log_extra,
            )
            return project.profile
        except OracleUnavailableError as e:
            logger.warning(
                f"Profile synthesis failed, keeping previous profile: {e.message}",
                extra={**log_extra, "error_code": e.code},
            )
            return project.profile
        except Exception as e:
            logger.error(
                f"Profile synthesis crashed, keeping previous profile: {e}",
                exc_info=True, extra=log_extra,
            )
            return project.profile

        project.profile = profile
        await self.db.flush()
        logger.info(
            f"Profile rebuilt from {len(rated)} rated house(s)", extra=log_extra,
        )
        return profile
