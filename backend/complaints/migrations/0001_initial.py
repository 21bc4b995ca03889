import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

PRIORITY_CHOICES = [("low", "Low"), ("medium", "Medium"), ("high", "High"), ("critical", "Critical")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Complaint",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("title", models.CharField(max_length=100, verbose_name="Title")),
                ("description", models.TextField(max_length=1000, verbose_name="Description")),
                ("category", models.CharField(choices=[("roads", "Roads & Potholes"), ("streetlight", "Streetlights"), ("sanitation", "Sanitation & Garbage"), ("water", "Water Supply"), ("tree", "Trees & Vegetation"), ("electricity", "Electricity"), ("drainage", "Drainage & Sewage"), ("others", "Others")], db_index=True, default="others", max_length=20, verbose_name="Category")),
                ("priority", models.CharField(choices=PRIORITY_CHOICES, db_index=True, default="medium", max_length=10, verbose_name="Priority")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("assigned", "Assigned"), ("in_progress", "In Progress"), ("resolved", "Resolved"), ("closed", "Closed")], db_index=True, default="pending", max_length=20, verbose_name="Status")),
                ("location", models.CharField(max_length=255, verbose_name="Location")),
                ("area", models.CharField(blank=True, default="", max_length=100, verbose_name="Area")),
                ("landmark", models.CharField(blank=True, default="", max_length=255, verbose_name="Landmark")),
                ("images", models.JSONField(blank=True, default=list, verbose_name="Image URLs")),
                ("citizen", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="complaints", to=settings.AUTH_USER_MODEL, verbose_name="Citizen")),
            ],
            options={
                "verbose_name": "Complaint",
                "verbose_name_plural": "Complaints",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("priority", models.CharField(choices=PRIORITY_CHOICES, default="medium", max_length=10, verbose_name="Priority")),
                ("status", models.CharField(choices=[("assigned", "Assigned"), ("in_progress", "In Progress"), ("completed", "Completed")], db_index=True, default="assigned", max_length=20, verbose_name="Status")),
                ("notes", models.TextField(blank=True, default="", verbose_name="Notes")),
                ("due_date", models.DateTimeField(blank=True, null=True, verbose_name="Due Date")),
                ("assigned_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name="Assigned At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("assigned_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="assignments_made", to=settings.AUTH_USER_MODEL, verbose_name="Assigned By")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to="complaints.complaint", verbose_name="Complaint")),
                ("officer", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="assignments", to=settings.AUTH_USER_MODEL, verbose_name="Officer")),
            ],
            options={
                "verbose_name": "Assignment",
                "verbose_name_plural": "Assignments",
                "ordering": ["-assigned_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Comment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.TextField(max_length=1000, verbose_name="Content")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="comments", to="complaints.complaint", verbose_name="Complaint")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="complaint_comments", to=settings.AUTH_USER_MODEL, verbose_name="Author")),
            ],
            options={
                "verbose_name": "Comment",
                "verbose_name_plural": "Comments",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="assignment",
            constraint=models.UniqueConstraint(condition=models.Q(("status__in", ["assigned", "in_progress"])), fields=("complaint",), name="unique_active_assignment_per_complaint"),
        ),
    ]
