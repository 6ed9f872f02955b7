from datetime import time
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from authentication.models import CustomUser
from inventory.models import MenuItem, WEEKDAYS
from wallet.models import Transaction
from wallet.services import credit_wallet


ADMIN = {
    'email': 'admin@canteen.com', 'password': 'admin123', 'first_name': 'Admin', 'last_name': 'User',
    'phone': '+91-9876543210',
}

STUDENTS = [
    # email, first name, last name, phone, student id, department, year, opening balance
    ('john@student.edu', 'John', 'Doe', '+91-9876543211', 'CS2021001', 'Computer Science', 3, 500),
    ('jane@student.edu', 'Jane', 'Smith', '+91-9876543212', 'EC2021002', 'Electronics', 2, 300),
    ('mike@student.edu', 'Mike', 'Johnson', '+91-9876543213', 'ME2021003', 'Mechanical', 4, 750),
]
STUDENT_PASSWORD = 'student123'

WEEKDAYS_ONLY = WEEKDAYS[:5]
WEEKEND = WEEKDAYS[4:]

MENU = [
    # name, category, price, spice, prep minutes, quantity, serving window, days, veg, vegan, description, ingredients
    ('Idli Sambar', 'breakfast', 40, 'mild', 15, 50, ('08:00', '11:00'), None, True, False,
     'Soft steamed rice cakes served with lentil curry and coconut chutney',
     ['Rice', 'Urad Dal', 'Toor Dal', 'Vegetables']),
    ('Masala Dosa', 'breakfast', 60, 'medium', 20, 30, ('08:00', '11:00'), None, True, True,
     'Crispy crepe filled with spiced potato filling, served with sambar and chutney',
     ['Rice', 'Urad Dal', 'Potatoes', 'Onions', 'Spices']),
    ('Poha', 'breakfast', 35, 'mild', 10, 40, ('08:00', '11:00'), WEEKDAYS_ONLY, True, True,
     'Flattened rice cooked with onions, mustard seeds, and curry leaves',
     ['Flattened Rice', 'Onions', 'Peanuts', 'Curry Leaves']),
    ('Chicken Biryani', 'lunch', 120, 'medium', 30, 25, ('12:00', '15:00'), None, False, False,
     'Fragrant basmati rice cooked with tender chicken pieces and aromatic spices',
     ['Basmati Rice', 'Chicken', 'Onions', 'Yogurt', 'Spices']),
    ('Paneer Butter Masala', 'lunch', 100, 'medium', 25, 30, ('12:00', '15:00'), None, True, False,
     'Cottage cheese cubes in rich tomato-based creamy gravy',
     ['Paneer', 'Tomatoes', 'Cream', 'Onions', 'Spices']),
    ('Dal Tadka', 'lunch', 70, 'mild', 20, 50, ('12:00', '15:00'), None, True, True,
     'Yellow lentils tempered with cumin, garlic, and aromatic spices',
     ['Toor Dal', 'Cumin', 'Garlic', 'Onions', 'Tomatoes']),
    ('Jeera Rice', 'lunch', 50, 'none', 15, 60, ('12:00', '15:00'), None, True, False,
     'Basmati rice cooked with cumin seeds and aromatic spices',
     ['Basmati Rice', 'Cumin Seeds', 'Bay Leaves', 'Ghee']),
    ('Mutton Curry', 'dinner', 150, 'hot', 45, 20, ('19:00', '22:00'), WEEKEND, False, False,
     'Tender mutton pieces cooked in rich and spicy gravy',
     ['Mutton', 'Onions', 'Tomatoes', 'Yogurt', 'Spices']),
    ('Palak Paneer', 'dinner', 90, 'mild', 25, 35, ('19:00', '22:00'), None, True, False,
     'Cottage cheese cubes in creamy spinach gravy',
     ['Paneer', 'Spinach', 'Cream', 'Onions', 'Garlic']),
    ('Samosa', 'snacks', 25, 'medium', 20, 80, ('16:00', '19:00'), None, True, True,
     'Crispy fried pastry filled with spiced potatoes and peas',
     ['Flour', 'Potatoes', 'Peas', 'Spices', 'Oil']),
    ('Pani Puri', 'snacks', 30, 'hot', 10, 60, ('16:00', '19:00'), WEEKDAYS[:6], True, True,
     'Crispy hollow puris filled with spicy tangy water and chutneys',
     ['Semolina', 'Chickpeas', 'Potatoes', 'Tamarind', 'Mint']),
    ('Vada Pav', 'snacks', 20, 'medium', 15, 70, ('16:00', '19:00'), None, True, True,
     'Spiced potato fritter served in a bun with chutneys',
     ['Potatoes', 'Bread', 'Chickpea Flour', 'Green Chutney']),
    ('Masala Chai', 'beverages', 15, 'mild', 5, 100, ('08:00', '22:00'), None, True, False,
     'Traditional Indian spiced tea with milk and aromatic spices',
     ['Tea Leaves', 'Milk', 'Sugar', 'Cardamom', 'Ginger']),
    ('Fresh Lime Water', 'beverages', 20, 'none', 3, 80, ('10:00', '20:00'), None, True, True,
     'Refreshing lime juice with mint and a hint of salt',
     ['Lime', 'Water', 'Mint', 'Salt', 'Sugar']),
    ('Lassi', 'beverages', 35, 'none', 5, 40, ('11:00', '19:00'), None, True, False,
     'Creamy yogurt-based drink available in sweet and salty variants',
     ['Yogurt', 'Water', 'Sugar', 'Salt', 'Mint']),
    ('Gulab Jamun', 'desserts', 40, 'none', 30, 30, ('12:00', '22:00'), None, True, False,
     'Soft milk dumplings soaked in rose-flavored sugar syrup',
     ['Milk Powder', 'Flour', 'Sugar', 'Rose Water', 'Cardamom']),
    ('Ice Cream', 'desserts', 50, 'none', 2, 50, ('12:00', '22:00'), None, True, False,
     'Creamy ice cream available in vanilla, chocolate, and strawberry flavors',
     ['Milk', 'Cream', 'Sugar', 'Flavoring']),
]


def _time(value):
    hours, minutes = value.split(':')
    return time(int(hours), int(minutes))


class Command(BaseCommand):
    help = "Create the sample admin, students and menu"

    def add_arguments(self, parser):
        parser.add_argument('--skip-menu', action='store_true', help="Only create the accounts")

    @transaction.atomic
    def handle(self, *args, **options):
        self._seed_users()
        if not options['skip_menu']:
            self._seed_menu()
        self.stdout.write(self.style.SUCCESS("Canteen seeded"))
        self.stdout.write(f"Admin: {ADMIN['email']} / {ADMIN['password']}")
        for student in STUDENTS:
            self.stdout.write(f"Student: {student[0]} / {STUDENT_PASSWORD}")

    def _seed_users(self):
        if not CustomUser.objects.filter(email=ADMIN['email']).exists():
            CustomUser.objects.create_superuser(**ADMIN)
            self.stdout.write(f"Created admin {ADMIN['email']}")

        for email, first, last, phone, student_id, department, year, balance in STUDENTS:
            if CustomUser.objects.filter(email=email).exists():
                continue
            user = CustomUser.objects.create_user(
                email=email, password=STUDENT_PASSWORD, first_name=first, last_name=last,
                phone=phone, student_id=student_id, department=department, year=year,
            )
            # Opening balances go through the ledger like any other credit
            credit_wallet(
                user.pk, Decimal(balance), Transaction.CATEGORY_ADJUSTMENT, "Opening balance",
                payment_method='admin-adjustment',
            )
            self.stdout.write(f"Created student {email} with balance {balance}")

    def _seed_menu(self):
        for (name, category, price, spice, prep, quantity, window, days,
             vegetarian, vegan, description, ingredients) in MENU:
            item, created = MenuItem.objects.get_or_create(
                name=name,
                defaults={
                    'category': category,
                    'price': Decimal(price),
                    'description': description,
                    'ingredients': ingredients,
                    'spice_level': spice,
                    'preparation_time': prep,
                    'quantity': quantity,
                    'is_vegetarian': vegetarian,
                    'is_vegan': vegan,
                    'available_from': _time(window[0]),
                    'available_to': _time(window[1]),
                },
            )
            if created and days:
                item.days = days
                item.save(update_fields=['available_days'])
            if created:
                self.stdout.write(f"Created menu item {name} - {price}")
