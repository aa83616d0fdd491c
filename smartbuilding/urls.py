from django.urls import path
from .views import (
    ApplyActionView,
    BuyCreditsView,
    CarbonView,
    ForecastView,
    RecommendationsView,
    TransferCreditsView,
    UnitCreditsView,
    UnitTwinView,
    health,
)

urlpatterns = [
    path("health/", health, name="health"),
    path("units/<int:unit_id>/twin/", UnitTwinView.as_view(), name="unit-twin"),
    path("units/<int:unit_id>/actions/", ApplyActionView.as_view(), name="unit-action"),
    path("units/<int:unit_id>/credits/", UnitCreditsView.as_view(), name="unit-credits"),
    path("units/<int:unit_id>/credits/buy/", BuyCreditsView.as_view(), name="unit-buy-credits"),
    path("units/<int:unit_id>/forecast/", ForecastView.as_view(), name="unit-forecast"),
    path("units/<int:unit_id>/carbon/", CarbonView.as_view(), name="unit-carbon"),
    path("units/<int:unit_id>/recommendations/", RecommendationsView.as_view(), name="unit-recommendations"),
    path("credits/transfer/", TransferCreditsView.as_view(), name="credits-transfer"),
]
