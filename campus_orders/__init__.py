"""Campus food-ordering backend: order placement and order lifecycle"""

__version__ = "1.0.0"
