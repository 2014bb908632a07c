from django.contrib import admin

from ticketing.models import Event, Profile, Ticket, TicketType, Transaction


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "role", "full_name", "created_at"]
    list_filter = ["role"]
    search_fields = ["user__username", "user__email", "full_name"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "organizer", "location", "starts_at", "status", "total_capacity"]
    list_filter = ["status", "category"]
    search_fields = ["title", "location"]
    inlines = [TicketTypeInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "quantity", "max_per_order"]
    list_filter = ["event"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["id", "event", "ticket_type", "holder", "status", "purchased_at"]
    list_filter = ["status", "event"]
    search_fields = ["holder__email"]


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ["type", "amount", "status", "user", "event", "created_at"]
    list_filter = ["type", "status"]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
