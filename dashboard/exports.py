import csv
import json

import openpyxl
from openpyxl.styles import Font
from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse
from django.utils import timezone

from authentication.models import CustomUser
from feedback.models import Feedback
from orders.models import Order
from wallet.models import Transaction


def _orders(date_range):
    orders = Order.objects.filter(**date_range).select_related('user').prefetch_related('items')
    headers = ['Order Number', 'Date', 'Student', 'Student ID', 'Items', 'Total', 'Status', 'Payment Method', 'Payment Status']
    rows = [
        [
            order.order_number,
            timezone.localtime(order.created_at).strftime('%Y-%m-%d %H:%M'),
            order.user.email,
            order.user.student_id or '',
            ", ".join(f"{item.quantity}x {item.menu_item_name}" for item in order.items.all()),
            order.total_amount,
            order.status,
            order.payment_method,
            order.payment_status,
        ]
        for order in orders.order_by('-created_at')
    ]
    return headers, rows


def _users(date_range):
    users = CustomUser.objects.filter(role=CustomUser.ROLE_STUDENT, **date_range)
    headers = ['Email', 'First Name', 'Last Name', 'Student ID', 'Department', 'Year', 'Wallet Balance', 'Active', 'Joined']
    rows = [
        [
            user.email, user.first_name, user.last_name, user.student_id or '', user.department,
            user.year, user.wallet_balance, user.is_active,
            timezone.localtime(user.created_at).strftime('%Y-%m-%d'),
        ]
        for user in users.order_by('-created_at')
    ]
    return headers, rows


def _transactions(date_range):
    transactions = Transaction.objects.filter(**date_range).select_related('user')
    headers = ['Transaction ID', 'Date', 'User', 'Type', 'Category', 'Amount', 'Balance After', 'Payment Method', 'Description']
    rows = [
        [
            txn.transaction_id,
            timezone.localtime(txn.created_at).strftime('%Y-%m-%d %H:%M'),
            txn.user.email, txn.type, txn.category, txn.amount, txn.balance_after,
            txn.payment_method, txn.description,
        ]
        for txn in transactions.order_by('-created_at', '-id')
    ]
    return headers, rows


def _feedback(date_range):
    feedback = Feedback.objects.filter(**date_range).select_related('user', 'menu_item', 'order')
    headers = ['Date', 'User', 'Order Number', 'Menu Item', 'Category', 'Rating', 'Review', 'Status']
    rows = [
        [
            timezone.localtime(entry.created_at).strftime('%Y-%m-%d %H:%M'),
            'Anonymous' if entry.is_anonymous else entry.user.email,
            entry.order.order_number, entry.menu_item.name, entry.menu_item.category,
            entry.rating, entry.review, entry.status,
        ]
        for entry in feedback.order_by('-created_at')
    ]
    return headers, rows


DATASETS = {
    'orders': _orders,
    'users': _users,
    'transactions': _transactions,
    'feedback': _feedback,
}
FORMATS = ['json', 'csv', 'xlsx']


def build_dataset(kind, start_date=None, end_date=None):
    """Headers and rows of one export, optionally limited to a creation date range"""
    date_range = {}
    if start_date:
        date_range['created_at__date__gte'] = start_date
    if end_date:
        date_range['created_at__date__lte'] = end_date
    return DATASETS[kind](date_range)


def json_response(kind, headers, rows):
    keys = [header.lower().replace(' ', '_') for header in headers]
    data = [dict(zip(keys, row)) for row in rows]
    return HttpResponse(
        json.dumps({'type': kind, 'count': len(data), 'data': data}, cls=DjangoJSONEncoder),
        content_type='application/json'
    )


def csv_response(kind, headers, rows):
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{kind}_{timezone.localdate():%Y%m%d}.csv"'

    writer = csv.writer(response)
    writer.writerow(headers)
    writer.writerows(rows)
    return response


def xlsx_response(kind, headers, rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = kind.capitalize()

    header_font = Font(bold=True, size=12)
    for col, header in enumerate(headers, 1):
        ws.cell(row=1, column=col, value=header).font = header_font

    for row_number, row in enumerate(rows, 2):
        for col, value in enumerate(row, 1):
            ws.cell(row=row_number, column=col, value=value)

    # Auto-adjust column widths
    for column in ws.columns:
        longest = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        ws.column_dimensions[column[0].column_letter].width = min(longest + 2, 50)

    response = HttpResponse(content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
    response['Content-Disposition'] = f'attachment; filename="{kind}_{timezone.localdate():%Y%m%d}.xlsx"'
    wb.save(response)
    return response


RENDERERS = {
    'json': json_response,
    'csv': csv_response,
    'xlsx': xlsx_response,
}
