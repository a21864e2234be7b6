from menuisland.models.restaurant import Restaurant, Template
from menuisland.models.menu import Category, MenuItem, Allergen, menu_item_allergens
from menuisland.models.analytics import AnalyticsDay, MenuItemViewEvent, LanguageUsageDay

__all__ = [
    "Restaurant",
    "Template",
    "Category",
    "MenuItem",
    "Allergen",
    "menu_item_allergens",
    "AnalyticsDay",
    "MenuItemViewEvent",
    "LanguageUsageDay",
]
