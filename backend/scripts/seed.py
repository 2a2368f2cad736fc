#!/usr/bin/env python3
"""
Seed script to fill the configured record store with a sample portfolio.

Generates projects with realistic structure:
- Activities laid out in consecutive "phases"
- Each activity depends on one or two activities of the previous phase
- A go/no-go milestone at the end of every phase

Usage:
    python -m scripts.seed [--projects 5] [--activities 20] [--clear]

Options:
    --projects N     Number of projects to create (default: 5)
    --activities N   Activities per project (default: 20)
    --clear          Delete every existing project (and what hangs off it) first
"""

import argparse
import asyncio
import random
import time
from datetime import date, timedelta

from portfolio.config import get_settings
from portfolio.logging_config import setup_logging
from portfolio.schemas import ProjectStatus
from portfolio.services.dependencies import create_dependency
from portfolio.services.graph import build_activity_graph
from portfolio.services.portfolio import get_project_details
from portfolio.store import RecordKind, RecordStore, create_record_store


PHASE_LENGTH_DAYS = 14


async def clear_data(store: RecordStore) -> None:
    """Delete all projects; cascades take their activities, milestones and dependencies."""
    projects = await store.list_records(RecordKind.PROJECT)
    print(f"Deleting {len(projects)} projects...")
    for project in projects:
        await store.delete(RecordKind.PROJECT, project.id)
    print("Data cleared.")


async def seed_project(store: RecordStore, index: int, num_activities: int, start: date) -> str:
    """Create one project with phased activities, milestones and dependencies."""
    num_phases = max(2, num_activities // 5)
    end = start + timedelta(days=num_phases * PHASE_LENGTH_DAYS)

    project = await store.create(
        RecordKind.PROJECT,
        {
            "name": f"Project {index:02d}",
            "description": f"Sample project with {num_activities} activities in {num_phases} phases",
            "start_date": start,
            "end_date": end,
            "project_owner": random.choice(["Anna Andersson", "Bo Berg", "Carl Dahl"]),
            "project_manager": random.choice(["Per Lindqvist", "Lisa Nyberg"]),
            "impact_owner": "Ida Holm",
            "status": random.choice([s.value for s in ProjectStatus]),
            "priority": random.randint(1, 5),
        },
    )

    phases: list[list[str]] = []
    created = 0
    for phase in range(num_phases):
        phase_start = start + timedelta(days=phase * PHASE_LENGTH_DAYS)
        phase_size = num_activities - created if phase == num_phases - 1 else num_activities // num_phases

        phase_ids = []
        for i in range(phase_size):
            activity = await store.create(
                RecordKind.ACTIVITY,
                {
                    "project_id": project.id,
                    "name": f"Activity P{phase:02d}-{i:02d}",
                    "start_date": phase_start + timedelta(days=random.randint(0, 3)),
                    "end_date": phase_start + timedelta(days=random.randint(5, PHASE_LENGTH_DAYS - 1)),
                    "status": "planned",
                    "responsible": random.choice(["Anna", "Per", "Lisa", "Bo"]),
                },
            )
            phase_ids.append(activity.id)
        created += phase_size
        phases.append(phase_ids)

        await store.create(
            RecordKind.MILESTONE,
            {
                "project_id": project.id,
                "name": f"Phase {phase} gate",
                "decision_type": "go/no-go",
                "date": phase_start + timedelta(days=PHASE_LENGTH_DAYS - 1),
            },
        )

        if phase > 0:
            for activity_id in phase_ids:
                prerequisites = random.sample(phases[phase - 1], k=min(2, len(phases[phase - 1])))
                for prerequisite_id in prerequisites[: random.randint(1, 2)]:
                    await create_dependency(
                        store,
                        {"from_activity_id": activity_id, "to_activity_id": prerequisite_id},
                    )

    return project.id


async def print_stats(store: RecordStore, project_ids: list[str]) -> None:
    """Statistics about the generated dependency graphs."""
    activities = dependencies = roots = 0
    for project_id in project_ids:
        details = await get_project_details(store, project_id)
        graph = build_activity_graph(details)
        activities += len(details.activities)
        dependencies += len(details.dependencies)
        roots += sum(1 for node in graph.nodes if graph.in_degree(node) == 0)

    print("\n=== Portfolio Statistics ===")
    print(f"Projects:     {len(project_ids)}")
    print(f"Activities:   {activities}")
    print(f"Dependencies: {dependencies}")
    print(f"Root activities: {roots} (depend on nothing)")


async def main():
    parser = argparse.ArgumentParser(description="Seed the record store with a sample portfolio")
    parser.add_argument("--projects", type=int, default=5, help="Number of projects to create")
    parser.add_argument("--activities", type=int, default=20, help="Activities per project")
    parser.add_argument("--clear", action="store_true", help="Delete existing projects first")

    args = parser.parse_args()
    setup_logging(level="WARNING")

    settings = get_settings()
    print("=== Portfolio Seed Script ===")
    print(f"Backend: {settings.backend_kind}")
    if settings.backend_kind == "memory":
        print("Warning: the in-memory store is discarded when this script exits.")

    store = create_record_store(settings)
    await store.open()
    try:
        if args.clear:
            await clear_data(store)

        start_time = time.time()
        project_ids = []
        for index in range(args.projects):
            start = date(2025, 1, 1) + timedelta(days=30 * index)
            project_ids.append(await seed_project(store, index, args.activities, start))
        print(f"Insert time: {time.time() - start_time:.2f}s")

        await print_stats(store, project_ids)
    finally:
        await store.close()

    print("\n=== Seeding Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
