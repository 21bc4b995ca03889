from django.contrib import admin

from .models import Assignment, Comment, Complaint


class AssignmentInline(admin.TabularInline):
    model = Assignment
    fk_name = "complaint"
    extra = 0
    fields = ("officer", "assigned_by", "status", "priority", "due_date", "assigned_at")
    readonly_fields = ("assigned_at",)


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    fields = ("user", "content", "created_at")
    readonly_fields = ("user", "content", "created_at")
    can_delete = False


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "priority", "status", "citizen", "created_at")
    list_filter = ("status", "category", "priority")
    search_fields = ("title", "description", "location", "citizen__username")
    inlines = [AssignmentInline, CommentInline]


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "complaint", "officer", "status", "priority", "assigned_at")
    list_filter = ("status", "priority", "officer__department")
    raw_id_fields = ("complaint", "officer", "assigned_by")


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("id", "complaint", "user", "created_at")
    raw_id_fields = ("complaint", "user")
