"""
API Layer — Message-Transport Gateway (Django REST Framework)

The chat transport delivers a unit identifier, an action or metric code and
optional numeric parameters; it expects success/failure plus the computed
quantities it has to render. These views are that adapter.

Responsibilities are intentionally limited to:

- Basic input validation and type coercion
- Delegation to the application use cases
- Translation of domain exceptions into HTTP responses

Mapping:

- Unit.DoesNotExist          -> 404
- InvalidCreditRequest        -> 400 (user-visible error)
- PricingNotConfigured        -> 503
- UpdateReplay                -> 200 "Update already processed."

Requests carrying an `update_id` claim it in the same transaction as the
action, so a failed action does not burn the id.
"""

from dataclasses import asdict

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework.views import APIView

from smartbuilding.application import carbon, credits, twin
from smartbuilding.application.forecast import forecast
from smartbuilding.application.recommendations import unit_recommendations
from smartbuilding.application.settings_store import load_config
from smartbuilding.application.updates import claim_update
from smartbuilding.domain.exceptions import InvalidCreditRequest, PricingNotConfigured, UpdateReplay
from smartbuilding.models import METRICS, Unit

TWIN_FIELDS = (
    "scenario", "season", "eco_mode", "lights_on", "water_heater_on", "ac_mode",
    "heating_temp", "cost_sensitivity", "green_sensitivity", "monthly_budget",
)


def _not_found():
    return Response({"error": "Unit not found."}, status=status.HTTP_404_NOT_FOUND)


def _bad_request(message):
    return Response({"error": message}, status=status.HTTP_400_BAD_REQUEST)


def _pricing_unavailable(exc):
    return Response({"error": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


def _replayed():
    return Response({"message": "Update already processed."}, status=status.HTTP_200_OK)


def _update_id(request):
    update_id = request.data.get("update_id")
    if update_id in (None, ""):
        return None
    return int(update_id)


@api_view(["GET"])
def health(request):
    return Response({"status": "ok"})


class UnitTwinView(APIView):
    """
    GET  /api/units/<id>/twin/
    POST /api/units/<id>/twin/

    POST accepts any of: scenario, season, ac_mode, heating_delta,
    cost_sensitivity + green_sensitivity, monthly_budget, toggle.
    Unknown enum values are ignored and left out of "applied".
    """

    def get(self, request, unit_id):
        try:
            unit = Unit.objects.get(id=unit_id)
        except Unit.DoesNotExist:
            return _not_found()

        state = twin.get_state(unit)
        return Response({"unit_id": unit.id, **{f: getattr(state, f) for f in TWIN_FIELDS}})

    def post(self, request, unit_id):
        try:
            unit = Unit.objects.get(id=unit_id)
        except Unit.DoesNotExist:
            return _not_found()

        data = request.data
        applied = []
        try:
            with transaction.atomic():
                if "scenario" in data and twin.set_scenario(unit, data["scenario"]):
                    applied.append("scenario")
                if "season" in data and twin.set_season(unit, data["season"]):
                    applied.append("season")
                if "ac_mode" in data and twin.set_ac_mode(unit, data["ac_mode"]):
                    applied.append("ac_mode")
                if "toggle" in data:
                    toggle = data["toggle"]
                    done = twin.toggle_eco_mode(unit) if toggle == "eco_mode" else twin.toggle_device(unit, toggle)
                    if done:
                        applied.append(toggle)
                if "heating_delta" in data:
                    twin.adjust_heating_temp(unit, int(data["heating_delta"]))
                    applied.append("heating_temp")
                if "cost_sensitivity" in data or "green_sensitivity" in data:
                    current = twin.get_or_create_state(unit)
                    twin.set_sensitivities(
                        unit,
                        int(data.get("cost_sensitivity", current.cost_sensitivity)),
                        int(data.get("green_sensitivity", current.green_sensitivity)),
                    )
                    applied.append("sensitivities")
                if "monthly_budget" in data:
                    twin.set_monthly_budget(unit, int(data["monthly_budget"]))
                    applied.append("monthly_budget")
        except (TypeError, ValueError):
            return _bad_request("Numeric twin parameters must be integers.")

        state = twin.get_state(unit)
        return Response({
            "unit_id": unit.id,
            "applied": applied,
            **{f: getattr(state, f) for f in TWIN_FIELDS},
        })


class ApplyActionView(APIView):
    """POST /api/units/<id>/actions/  {action, update_id?}"""

    def post(self, request, unit_id):
        action = request.data.get("action")
        if not action:
            return _bad_request("action is required.")

        try:
            update_id = _update_id(request)
        except (TypeError, ValueError):
            return _bad_request("update_id must be an integer.")

        try:
            with transaction.atomic():
                if update_id is not None:
                    claim_update(update_id)
                unit = Unit.objects.get(id=unit_id)
                applied = twin.apply_action(unit, action)
        except Unit.DoesNotExist:
            return _not_found()
        except UpdateReplay:
            return _replayed()

        return Response({"unit_id": unit.id, "action": action, "applied": applied})


class UnitCreditsView(APIView):
    """GET /api/units/<id>/credits/  balances and current prices."""

    def get(self, request, unit_id):
        try:
            unit = Unit.objects.get(id=unit_id)
        except Unit.DoesNotExist:
            return _not_found()

        config = load_config()
        try:
            prices = {metric: credits.credit_price(metric, config) for metric in METRICS}
        except PricingNotConfigured as exc:
            return _pricing_unavailable(exc)

        return Response({"unit_id": unit.id, "balances": credits.get_credits(unit), "prices": prices})


class BuyCreditsView(APIView):
    """POST /api/units/<id>/credits/buy/  {metric, amount, update_id?}"""

    def post(self, request, unit_id):
        metric = request.data.get("metric")
        amount = request.data.get("amount")

        if not all([metric, amount]):
            return _bad_request("metric and amount are required.")

        try:
            update_id = _update_id(request)
        except (TypeError, ValueError):
            return _bad_request("update_id must be an integer.")

        config = load_config()
        try:
            with transaction.atomic():
                if update_id is not None:
                    claim_update(update_id)
                ledger = credits.buy_credits(unit_id, metric, amount, config)
        except Unit.DoesNotExist:
            return _not_found()
        except InvalidCreditRequest as exc:
            return _bad_request(str(exc))
        except PricingNotConfigured as exc:
            return _pricing_unavailable(exc)
        except UpdateReplay:
            return _replayed()

        return Response({
            "transaction_id": ledger.id,
            "unit_id": ledger.to_unit_id,
            "metric": ledger.metric,
            "amount": ledger.amount,
            "price_per_credit": ledger.price_per_credit,
            "total_price": ledger.total_price,
        })


class TransferCreditsView(APIView):
    """POST /api/credits/transfer/  {from_unit_id, to_unit_id, metric, amount}"""

    def post(self, request):
        from_unit_id = request.data.get("from_unit_id")
        to_unit_id = request.data.get("to_unit_id")
        metric = request.data.get("metric")
        amount = request.data.get("amount")

        if not all([from_unit_id, to_unit_id, metric, amount]):
            return _bad_request("from_unit_id, to_unit_id, metric and amount are required.")

        try:
            from_unit_id = int(from_unit_id)
            to_unit_id = int(to_unit_id)
        except (TypeError, ValueError):
            return _bad_request("Unit ids must be integers.")

        try:
            ledger = credits.sell_credits(from_unit_id, to_unit_id, metric, amount, load_config())
        except Unit.DoesNotExist:
            return _not_found()
        except InvalidCreditRequest as exc:
            return _bad_request(str(exc))
        except PricingNotConfigured as exc:
            return _pricing_unavailable(exc)

        return Response({
            "transaction_id": ledger.id,
            "from_unit_id": ledger.from_unit_id,
            "to_unit_id": ledger.to_unit_id,
            "metric": ledger.metric,
            "amount": ledger.amount,
            "total_price": ledger.total_price,
        })


class ForecastView(APIView):
    def get(self, request, unit_id):
        try:
            unit = Unit.objects.get(id=unit_id)
            result = forecast(unit, load_config())
        except Unit.DoesNotExist:
            return _not_found()
        except PricingNotConfigured as exc:
            return _pricing_unavailable(exc)

        return Response({"unit_id": unit.id, **asdict(result)})


class CarbonView(APIView):
    """GET /api/units/<id>/carbon/?period=today|week|month"""

    def get(self, request, unit_id):
        try:
            unit = Unit.objects.get(id=unit_id)
        except Unit.DoesNotExist:
            return _not_found()

        period = request.query_params.get("period", carbon.TODAY)
        if period not in carbon.PERIODS:
            return _bad_request(f"period must be one of {', '.join(carbon.PERIODS)}.")

        config = load_config()
        return Response({
            "unit_id": unit.id,
            "period": period,
            **asdict(carbon.unit_breakdown(unit, config, period)),
            "forecast_month_kg": carbon.forecast_month_kg(unit, config),
            "daily_target_kg": config.carbon_daily_target_kg,
        })


class RecommendationsView(APIView):
    def get(self, request, unit_id):
        try:
            unit = Unit.objects.get(id=unit_id)
            items = unit_recommendations(unit, load_config())
        except Unit.DoesNotExist:
            return _not_found()
        except PricingNotConfigured as exc:
            return _pricing_unavailable(exc)

        return Response({"unit_id": unit.id, "items": [asdict(item) for item in items]})
