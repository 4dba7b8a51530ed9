from .orders import Order
from .inventory import ProductVariation
from .returns import ReturnedItem, ImmutableRecordError

__all__ = [
    'Order',
    'ProductVariation',
    'ReturnedItem', 'ImmutableRecordError',
]
