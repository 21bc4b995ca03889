"""
Management command: seed_mock_data
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Fills a development database with an administrator, officers in every
department, citizens, and complaints spread across categories,
priorities and statuses.

Accounts are created with ``get_or_create`` keyed on username, so the
command is **idempotent**: a second run leaves existing accounts alone
and only adds complaints when the seeded citizens have none yet.

Every assignment and status change goes through ``LifecycleEngine``,
so the seeded data satisfies the same rules as data created through
the API (at most one active assignment per complaint, status cascade).

Usage::

    python manage.py seed_mock_data [--complaints 50] [--password password123] [--seed 7]
"""

from __future__ import annotations

import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import DEPARTMENTS, User
from complaints.models import (
    AssignmentStatus,
    Complaint,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
)
from complaints.services import CommentService, LifecycleEngine
from core.permissions_constants import UserRole

ADMIN = ("admin", "System", "Administrator", "admin@civic.gov")

OFFICERS = [
    ("john.smith", "John", "Smith", "Public Works"),
    ("sarah.johnson", "Sarah", "Johnson", "Utilities"),
    ("mike.davis", "Mike", "Davis", "Transportation"),
    ("lisa.wilson", "Lisa", "Wilson", "Parks & Recreation"),
    ("david.brown", "David", "Brown", "Environmental Services"),
    ("emily.garcia", "Emily", "Garcia", "Public Works"),
    ("robert.martinez", "Robert", "Martinez", "Utilities"),
    ("jennifer.lee", "Jennifer", "Lee", "Transportation"),
]

CITIZENS = [
    ("alice.cooper", "Alice", "Cooper"),
    ("bob.thompson", "Bob", "Thompson"),
    ("carol.white", "Carol", "White"),
    ("daniel.clark", "Daniel", "Clark"),
    ("eva.rodriguez", "Eva", "Rodriguez"),
    ("frank.miller", "Frank", "Miller"),
    ("grace.taylor", "Grace", "Taylor"),
    ("henry.anderson", "Henry", "Anderson"),
    ("iris.jackson", "Iris", "Jackson"),
    ("jack.wilson", "Jack", "Wilson"),
]

TITLES = [
    "Pothole on Main Street needs urgent repair",
    "Street light not working for 3 days",
    "Garbage not collected for a week",
    "Water leak in residential area",
    "Fallen tree blocking sidewalk",
    "Power outage in neighborhood",
    "Blocked drainage causing flooding",
    "Broken fire hydrant leaking water",
    "Traffic signal malfunction",
    "Overgrown vegetation blocking road signs",
    "Sewer backup in basement",
    "Cracked sidewalk causing safety hazard",
]

DESCRIPTIONS = [
    "This issue has been ongoing for several days and is causing significant inconvenience to residents.",
    "The problem is affecting multiple households in the area. We would appreciate a quick resolution.",
    "This is a safety concern that needs immediate attention. Children and elderly people are at risk.",
    "The situation is getting worse each day. Please send someone to assess and fix the problem.",
    "This has been reported before but no action was taken. Please escalate to the concerned department.",
]

LOCATIONS = [
    ("123 Main Street", "Downtown", "City Hall"),
    ("456 Oak Avenue", "Residential District", "Community Center"),
    ("789 Commerce Blvd", "Business District", "Shopping Mall"),
    ("321 Elm Street", "Suburban Area", "Local School"),
    ("987 Heritage Lane", "Historic District", "Old Church"),
    ("258 Harbor View", "Waterfront", "Marina"),
]

# Final state each seeded complaint is driven to, with its weight.
TARGET_STATES = [
    (ComplaintStatus.PENDING, 3),
    (ComplaintStatus.ASSIGNED, 2),
    (ComplaintStatus.IN_PROGRESS, 2),
    (ComplaintStatus.RESOLVED, 2),
    (ComplaintStatus.CLOSED, 1),
]


class Command(BaseCommand):
    help = (
        "Seeds an administrator, department officers, citizens and sample "
        "complaints with assignments.  Safe to run multiple times."
    )

    def add_arguments(self, parser):
        parser.add_argument("--complaints", type=int, default=50)
        parser.add_argument("--password", default="password123")
        parser.add_argument("--seed", type=int, default=7, help="Random seed.")

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  Seeding mock civic complaint data"
            "\n══════════════════════════════════════════\n"
        ))
        rng = random.Random(options["seed"])
        password = options["password"]

        with transaction.atomic():
            admin, officers, citizens = self._seed_users(password)

        if Complaint.objects.filter(citizen__in=citizens).exists():
            self.stdout.write(self.style.WARNING(
                "  ⚠  Seeded citizens already have complaints; skipping complaints."
            ))
            return

        engine = LifecycleEngine()
        counts = {state: 0 for state, _ in TARGET_STATES}
        for index in range(options["complaints"]):
            complaint = self._create_complaint(rng, citizens, index)
            target = rng.choices(
                [state for state, _ in TARGET_STATES],
                weights=[weight for _, weight in TARGET_STATES],
            )[0]
            self._drive_to(engine, rng, complaint, target, admin, officers)
            counts[target] += 1

        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n──────────────────────────────────────────"
        ))
        breakdown = ", ".join(f"{state}={n}" for state, n in counts.items())
        self.stdout.write(self.style.SUCCESS(
            f"  Done!  1 admin, {len(officers)} officer(s), {len(citizens)} citizen(s), "
            f"{options['complaints']} complaint(s) ({breakdown}).\n"
            f"  Login with any seeded username and password '{password}'.\n"
        ))

    # ── Accounts ────────────────────────────────────────────────────

    def _get_or_create_user(self, number, username, first, last, email, role, password, department=""):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                "first_name": first,
                "last_name": last,
                "email": email,
                "phone_number": f"+1555{number:07d}",
                "role": role,
                "department": department,
            },
        )
        if created:
            user.set_password(password)
            user.save(update_fields=["password"])
            self.stdout.write(self.style.SUCCESS(f"  ✔  Created {role}: {username}"))
        return user

    def _seed_users(self, password):
        username, first, last, email = ADMIN
        admin = self._get_or_create_user(
            1, username, first, last, email, UserRole.ADMIN, password, DEPARTMENTS[0],
        )
        officers = [
            self._get_or_create_user(
                100 + n, username, first, last, f"{username}@civic.gov",
                UserRole.OFFICER, password, department,
            )
            for n, (username, first, last, department) in enumerate(OFFICERS)
        ]
        citizens = [
            self._get_or_create_user(
                1000 + n, username, first, last, f"{username}@email.com",
                UserRole.CITIZEN, password,
            )
            for n, (username, first, last) in enumerate(CITIZENS)
        ]
        return admin, officers, citizens

    # ── Complaints ──────────────────────────────────────────────────

    def _create_complaint(self, rng, citizens, index):
        address, area, landmark = rng.choice(LOCATIONS)
        complaint = Complaint.objects.create(
            citizen=rng.choice(citizens),
            title=rng.choice(TITLES),
            description=rng.choice(DESCRIPTIONS),
            category=rng.choice(ComplaintCategory.values),
            priority=rng.choice(ComplaintPriority.values),
            location=f"{address}, {area}",
            area=area,
            landmark=landmark,
            images=[f"https://img.civic.example/complaint-{index + 1}.jpg"] if rng.random() > 0.7 else [],
        )
        # Spread filing dates over the last six months.
        filed_at = timezone.now() - timedelta(days=rng.randint(0, 180), hours=rng.randint(0, 23))
        Complaint.objects.filter(pk=complaint.pk).update(created_at=filed_at, updated_at=filed_at)
        complaint.refresh_from_db()
        return complaint

    def _drive_to(self, engine, rng, complaint, target, admin, officers):
        if target == ComplaintStatus.PENDING:
            return

        officer = rng.choice(officers)
        assignment = engine.create_assignment(
            complaint_id=complaint.pk,
            officer_id=officer.pk,
            assigner=admin,
            priority=complaint.priority,
            due_date=timezone.now() + timedelta(days=rng.randint(1, 7)),
            notes=f"Assigned to {officer.department}. Please handle according to priority level.",
        )
        if rng.random() > 0.6:
            CommentService.post_comment(
                officer,
                complaint.pk,
                "Thank you for reporting this issue. We are looking into it.",
            )

        if target == ComplaintStatus.ASSIGNED:
            return
        engine.update_assignment_status(
            assignment.pk, officer, new_status=AssignmentStatus.IN_PROGRESS,
        )
        if target == ComplaintStatus.IN_PROGRESS:
            return
        engine.update_assignment_status(
            assignment.pk, officer, new_status=AssignmentStatus.COMPLETED,
        )
        if target == ComplaintStatus.CLOSED:
            engine.update_complaint_status(complaint.pk, ComplaintStatus.CLOSED, admin)
