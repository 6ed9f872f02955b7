from django.urls import path
from . import views


urlpatterns = [
    path('balance/', views.wallet_balance, name='wallet-balance'),
    path('recharge/', views.recharge, name='wallet-recharge'),
    path('transactions/', views.MyTransactionListView.as_view(), name='wallet-transactions'),
    path('transactions/<int:pk>/', views.TransactionDetailView.as_view(), name='wallet-transaction-detail'),
    path('stats/', views.wallet_stats, name='wallet-stats'),

    # Admin URLs
    path('admin/transactions/', views.AdminTransactionListView.as_view(), name='wallet-admin-transactions'),
    path('admin/adjust/', views.admin_adjust, name='wallet-admin-adjust'),
    path('admin/stats/', views.admin_stats, name='wallet-admin-stats'),
    path('admin/ledger/<uuid:user_id>/', views.ledger_check, name='wallet-admin-ledger'),
]
