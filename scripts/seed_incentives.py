from __future__ import annotations

import argparse
import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from incentive_ledger.db.models.challenges import Challenge
from incentive_ledger.db.models.rewards import Reward
from incentive_ledger.db.repo.challenges_repo import ChallengesRepo
from incentive_ledger.db.repo.rewards_repo import RewardsRepo
from incentive_ledger.economy.challenges.types import ChallengeStatus
from incentive_ledger.economy.points.locks import ledger_session


def parse_utc_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _validate_reward(item: dict[str, Any]) -> None:
    for field in ("name", "category", "type", "point_cost"):
        if field not in item:
            raise ValueError(f"reward is missing '{field}': {item}")
    if int(item["point_cost"]) <= 0:
        raise ValueError(f"reward '{item['name']}' must have a positive point_cost")


def _validate_challenge(item: dict[str, Any]) -> None:
    for field in ("name", "category", "start_date", "end_date"):
        if field not in item:
            raise ValueError(f"challenge is missing '{field}': {item}")
    if parse_utc_datetime(item["end_date"]) < parse_utc_datetime(item["start_date"]):
        raise ValueError(f"challenge '{item['name']}' ends before it starts")
    if int(item.get("reward_points", 0)) < 0:
        raise ValueError(f"challenge '{item['name']}' must not have negative reward_points")


async def seed_catalog(
    session: AsyncSession,
    *,
    document: dict[str, Any],
    now_utc: datetime,
) -> dict[str, int]:
    """Inserts rewards and challenges missing by name; existing rows are left untouched."""
    rewards_created = 0
    challenges_created = 0

    for item in document.get("rewards", []):
        _validate_reward(item)
        if await RewardsRepo.get_by_name(session, item["name"]) is not None:
            continue
        await RewardsRepo.create(
            session,
            reward=Reward(
                name=item["name"],
                description=item.get("description", ""),
                category=item["category"],
                type=item["type"],
                point_cost=int(item["point_cost"]),
                is_available=bool(item.get("is_available", True)),
                image=item.get("image"),
                created_at=now_utc,
            ),
        )
        rewards_created += 1

    for item in document.get("challenges", []):
        _validate_challenge(item)
        if await ChallengesRepo.get_by_name(session, item["name"]) is not None:
            continue
        await ChallengesRepo.create(
            session,
            challenge=Challenge(
                name=item["name"],
                description=item.get("description", ""),
                category=item["category"],
                start_date=parse_utc_datetime(item["start_date"]),
                end_date=parse_utc_datetime(item["end_date"]),
                criteria=dict(item.get("criteria") or {}),
                status=ChallengeStatus(item.get("status", ChallengeStatus.ACTIVE.value)).value,
                reward_points=int(item.get("reward_points", 0)),
                created_at=now_utc,
            ),
        )
        challenges_created += 1

    return {"rewards_created": rewards_created, "challenges_created": challenges_created}


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the reward catalog and challenge registry")
    parser.add_argument(
        "--input",
        type=Path,
        default=Path(__file__).with_name("seed_incentives.json"),
        help="JSON document with 'rewards' and 'challenges' lists",
    )
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args()


async def _run() -> int:
    args = _parse_args()
    document = json.loads(args.input.read_text(encoding="utf-8"))

    if args.dry_run:
        for item in document.get("rewards", []):
            _validate_reward(item)
        for item in document.get("challenges", []):
            _validate_challenge(item)
        print(  # noqa: T201
            f"validated rewards={len(document.get('rewards', []))} "
            f"challenges={len(document.get('challenges', []))}"
        )
        return 0

    async with ledger_session() as session:
        result = await seed_catalog(
            session,
            document=document,
            now_utc=datetime.now(timezone.utc),
        )
    print(  # noqa: T201
        f"rewards_created={result['rewards_created']} challenges_created={result['challenges_created']}"
    )
    return 0


def main() -> int:
    return asyncio.run(_run())


if __name__ == "__main__":
    raise SystemExit(main())
