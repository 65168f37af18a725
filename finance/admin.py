from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserCreationForm
from .models import User, Category, Account, Transaction


class SignupForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ("email", "username")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    add_form = SignupForm
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "username", "password1", "password2")}),
    )
    list_display = ('id', 'email', 'username', 'first_name', 'last_name', 'is_staff')
    search_fields = ('email', 'username')
    ordering = ('id',)

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'type', 'icon')
    list_filter = ('type',)
    search_fields = ('name',)

@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'account_type', 'user', 'balance')
    list_filter = ('account_type', 'user')
    search_fields = ('name',)
    # balances only move through the ledger service
    readonly_fields = ('balance', 'created_at', 'updated_at')

@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "amount", "description", "user", "account", "category", "created_at")
    list_filter = ('type', 'account', 'category')
    search_fields = ('description',)
    readonly_fields = ('user', 'account', 'category', 'type', 'amount', 'counterpart', 'created_at', 'updated_at')

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
