from models.users import User, UserRole
from models.categories import Category
from models.products import Product
from models.addresses import Address
from models.carts import Cart, CartItem
from models.orders import Order, OrderItem, OrderStatusHistory, OrderStatus, FulfillmentType, PaymentMethod, PaymentStatus
from models.chart_of_accounts import ChartOfAccounts, AccountType, AccountCategory, AccountCode
from models.ledger_entries import LedgerEntry, LedgerDirection, LedgerReferenceType
from models.cod_tracking import CODTracking
from models.financial_adjustments import FinancialAdjustment, AdjustmentType, AdjustmentStatus
from models.site_configuration import SiteConfiguration, ConfigCategory
from models.cms import Page, PageStatus, Banner
from models.audit_log import AuditLog

__all__ = [
    'AccountCategory', 'AccountCode', 'AccountType', 'Address', 'AdjustmentStatus', 'AdjustmentType',
    'AuditLog', 'Banner', 'CODTracking', 'Cart', 'CartItem', 'Category', 'ChartOfAccounts', 'ConfigCategory',
    'FinancialAdjustment', 'FulfillmentType', 'LedgerDirection', 'LedgerEntry', 'LedgerReferenceType', 'Order',
    'OrderItem', 'OrderStatus', 'OrderStatusHistory', 'Page', 'PageStatus', 'PaymentMethod', 'PaymentStatus',
    'Product', 'SiteConfiguration', 'User', 'UserRole',
]
