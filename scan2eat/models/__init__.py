from scan2eat.models.order import Order
from scan2eat.models.menu_item import MenuItem
