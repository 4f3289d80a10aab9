from .donors import router as donors_router
from .donations import router as donations_router
from .requests import router as requests_router
from .inventory import router as inventory_router
