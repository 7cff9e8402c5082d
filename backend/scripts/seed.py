#!/usr/bin/env python3
"""
Seed script that fills an empty store with sample milestones and tasks.

Seeds two milestones per competition category and a handful of tasks, some
linked to a milestone and some left unassigned, with a mix of statuses,
priorities and missing dates so every timeline bar style shows up.

Usage:
    python -m scripts.seed [--clear] [--force]

Options:
    --clear      Delete existing tasks and milestones before seeding
    --force      Seed even when the store already holds tasks
"""

import argparse
import asyncio
from datetime import datetime, time, timedelta, timezone

from pitcrew.database import init_db
from pitcrew.logging_config import setup_logging
from pitcrew.store import MILESTONES, TASKS, DocumentStore, get_store, should_use_firestore


def _day(offset: int) -> datetime:
    today = datetime.now(timezone.utc).date()
    return datetime.combine(today + timedelta(days=offset), time.min, tzinfo=timezone.utc)


SAMPLE_MILESTONES = [
    {
        "key": "ftc-build",
        "name": "FTC Robot Build",
        "description": "Mechanical build for the qualifier robot",
        "category": "FTC",
        "color": "#3b82f6",
        "status": "In Progress",
        "start_date": _day(-3),
        "end_date": _day(14),
    },
    {
        "key": "ftc-software",
        "name": "FTC Autonomous",
        "description": "Autonomous routines and tuning",
        "category": "FTC",
        "color": "#8b5cf6",
        "status": "Not Started",
        "start_date": _day(7),
        "end_date": None,
    },
    {
        "key": "frc-kickoff",
        "name": "FRC Kickoff Prep",
        "description": "Electrical and drive practice before kickoff",
        "category": "FRC",
        "color": "#f97316",
        "status": "Not Started",
        "start_date": _day(0),
        "end_date": _day(21),
    },
]

SAMPLE_TASKS = [
    {
        "milestone": "ftc-build",
        "title": "Prototype intake",
        "description": "Build and test intake mechanism prototype",
        "team": "Unhatched Plan",
        "category": "FTC",
        "department": "ELECTRICAL",
        "subsystem": "Intake",
        "start_date": _day(0),
        "due_date": _day(7),
        "status": "Not Started",
        "priority": "Medium",
    },
    {
        "milestone": "ftc-build",
        "title": "Assemble arm subsystem",
        "description": "Complete assembly of robot arm",
        "team": "Unhatched Plan",
        "category": "FTC",
        "subsystem": "Shooter",
        "assigned_to": "Morgan",
        "start_date": _day(-2),
        "due_date": _day(3),
        "status": "Completed",
        "priority": "Medium",
    },
    {
        "milestone": "ftc-build",
        "title": "Build chassis prototype",
        "description": "Construct initial chassis design",
        "team": "Unhatched Plan",
        "category": "FTC",
        "assigned_to": "Alex",
        "start_date": _day(0),
        "due_date": _day(14),
        "status": "Blocked",
        "priority": "High",
    },
    {
        "milestone": "ftc-software",
        "title": "Program autonomous mode",
        "description": "Implement autonomous navigation",
        "team": "Unhatched Plan",
        "category": "FTC",
        "assigned_to": "Jordan",
        "start_date": _day(7),
        "status": "In Progress",
        "priority": "Critical",
        "needs_mentor": True,
    },
    {
        "milestone": None,
        "title": "Test drive train",
        "description": "Verify drivetrain performance",
        "team": "Weight on Our Shoulders",
        "category": "FTC",
        "assigned_to": "Casey",
        "status": "Not Started",
        "priority": "Medium",
    },
    {
        "milestone": "frc-kickoff",
        "title": "Wire electrical panel",
        "description": "Complete wiring for control panel",
        "team": "Icarus Innovated",
        "category": "FRC",
        "assigned_to": "Taylor",
        "start_date": _day(1),
        "due_date": _day(10),
        "status": "Not Started",
        "priority": "High",
        "needs_mentor": True,
    },
    {
        "milestone": "frc-kickoff",
        "title": "Practice driver skills",
        "description": "Driver practice sessions",
        "team": "New Hawks",
        "category": "FRC",
        "assigned_to": "Jamie",
        "start_date": _day(5),
        "due_date": _day(19),
        "status": "Not Started",
        "priority": "Low",
    },
]


async def clear_data(store: DocumentStore):
    """Delete every task and milestone."""
    print("Clearing existing data...")
    for collection in (TASKS, MILESTONES):
        records = await store.get_all(collection)
        for record in records:
            await store.remove(collection, record.id)
        print(f"  Removed {len(records)} {collection}")


async def seed(store: DocumentStore) -> tuple[int, int]:
    milestone_ids = {}
    for sample in SAMPLE_MILESTONES:
        data = {k: v for k, v in sample.items() if k != "key"}
        milestone = await store.create(MILESTONES, data)
        milestone_ids[sample["key"]] = milestone.id
        print(f"Created milestone: {milestone.name} ({milestone.id})")

    for sample in SAMPLE_TASKS:
        data = {k: v for k, v in sample.items() if k != "milestone"}
        data["milestone_id"] = milestone_ids.get(sample["milestone"])
        task = await store.create(TASKS, data)
        print(f"Created task: {task.title} ({task.id})")

    return len(SAMPLE_MILESTONES), len(SAMPLE_TASKS)


async def main():
    parser = argparse.ArgumentParser(description="Seed the store with sample milestones and tasks")
    parser.add_argument("--clear", action="store_true", help="Clear existing data first")
    parser.add_argument("--force", action="store_true", help="Seed even if tasks already exist")

    args = parser.parse_args()

    setup_logging()
    print("=== Pitcrew Seed Script ===")

    if not should_use_firestore():
        await init_db()
    store = get_store()

    if args.clear:
        await clear_data(store)
    elif not args.force and await store.get_all(TASKS):
        print("Store already holds tasks, nothing to do (use --clear or --force).")
        return

    milestones, tasks = await seed(store)
    print("\n=== Seeding Complete ===")
    print(f"Milestones: {milestones}")
    print(f"Tasks:      {tasks}")


if __name__ == "__main__":
    asyncio.run(main())
