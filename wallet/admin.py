from django.contrib import admin

from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ['transaction_id', 'user', 'type', 'category', 'amount', 'balance_after', 'created_at']
    list_filter = ['type', 'category', 'status']
    search_fields = ['transaction_id', 'user__email', 'description']

    # The ledger is append-only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
