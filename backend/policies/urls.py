from rest_framework.routers import SimpleRouter

from .views import PolicyViewSet

# /api/policies/ (tablero) y /api/policies/<id> (cuotas con estado); solo lectura
router = SimpleRouter(trailing_slash=False)
router.register(r"", PolicyViewSet, basename="policies")

urlpatterns = router.urls
