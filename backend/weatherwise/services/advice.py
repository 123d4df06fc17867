from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from weatherwise.services.models import AdviceBucket, DateType, WeatherSummary


class AdviceContext(str, Enum):
    DASHBOARD = "dashboard"
    EVENT = "event"
    TRAVEL = "travel"


@dataclass(frozen=True)
class AdviceRule:
    bucket: AdviceBucket
    applies: Callable[[WeatherSummary], bool]


# Dashboard activity recommendation.
DASHBOARD_INDOOR_RAIN_PROB = 30.0
DASHBOARD_EARLY_HOURS_HEAT_PROB = 25.0
DASHBOARD_HIKING_TEMP_RANGE_C = (20.0, 30.0)
DASHBOARD_HIKING_MAX_RAINFALL_MM = 5.0
DASHBOARD_CYCLING_MIN_TEMP_C = 15.0
DASHBOARD_CYCLING_MAX_RAINFALL_MM = 2.0

# Event planning, strictest safety thresholds.
EVENT_DANGEROUS_HEAT_TEMP_C = 35.0
EVENT_DANGEROUS_HEAT_PROB = 20.0
EVENT_SEVERE_RAIN_PROB = 40.0
EVENT_SEVERE_RAINFALL_MM = 20.0
EVENT_DANGEROUS_WIND_MS = 25.0
EVENT_HIGH_RAIN_PROB = 25.0
EVENT_HIGH_RAINFALL_MM = 12.0
EVENT_VERY_HOT_TEMP_C = 32.0
EVENT_VERY_HOT_PROB = 15.0
EVENT_FREEZING_TEMP_C = 8.0
EVENT_RAIN_PROB = 15.0
EVENT_RAINFALL_MM = 6.0
EVENT_WARM_TEMP_C = 28.0
EVENT_WARM_PROB = 8.0
EVENT_COLD_TEMP_C = 12.0
EVENT_WINDY_MS = 15.0
EVENT_HUMID_PCT = 80.0
EVENT_LIGHT_RAIN_PROB = 8.0
EVENT_LIGHT_RAINFALL_MM = 3.0
EVENT_BREEZY_MS = 8.0
EVENT_GREAT_TEMP_RANGE_C = (22.0, 28.0)
EVENT_PERFECT_SCORE = 95

# Travel planning.
TRAVEL_HOT_TEMP_C = 32.0
TRAVEL_HOT_PROB = 15.0
TRAVEL_RAIN_PROB = 25.0
TRAVEL_RAINFALL_MM = 12.0
TRAVEL_COLD_TEMP_C = 10.0
TRAVEL_WINDY_MS = 20.0
TRAVEL_WARM_TEMP_RANGE_C = (25.0, 32.0)
TRAVEL_PERFECT_TEMP_RANGE_C = (15.0, 25.0)

WIND_MODERATE_THRESHOLD = 15.0
WIND_STRONG_THRESHOLD = 30.0


def event_suitability_score(summary: WeatherSummary) -> int:
    score = 100
    temperature = summary.avg_temperature
    if temperature > 35:
        score -= 40
    elif temperature > 30:
        score -= 20
    elif temperature < 10:
        score -= 35
    elif temperature < 15:
        score -= 15

    if summary.heavy_rain_probability > 30:
        score -= 50
    elif summary.heavy_rain_probability > 15:
        score -= 25
    elif summary.heavy_rain_probability > 5:
        score -= 10

    if summary.avg_wind_speed > 20:
        score -= 30
    elif summary.avg_wind_speed > 12:
        score -= 15

    if summary.avg_humidity > 85:
        score -= 15
    elif summary.avg_humidity > 75:
        score -= 8

    return max(0, score)


DASHBOARD_RULES: tuple[AdviceRule, ...] = (
    AdviceRule(
        AdviceBucket("indoor_activities", "🏠", "Indoor Activities", "Heavy rain is likely. Plan indoor activities.", 0),
        lambda s: s.heavy_rain_probability > DASHBOARD_INDOOR_RAIN_PROB,
    ),
    AdviceRule(
        AdviceBucket(
            "early_morning_evening",
            "🌅",
            "Early Morning/Evening",
            "High heat risk. Keep outdoor plans to the cooler hours.",
            1,
        ),
        lambda s: s.extreme_heat_probability > DASHBOARD_EARLY_HOURS_HEAT_PROB,
    ),
    AdviceRule(
        AdviceBucket("hiking", "🥾", "Perfect for Hiking", "Mild temperatures and little rain.", 2),
        lambda s: DASHBOARD_HIKING_TEMP_RANGE_C[0] < s.avg_temperature < DASHBOARD_HIKING_TEMP_RANGE_C[1]
        and s.avg_rainfall < DASHBOARD_HIKING_MAX_RAINFALL_MM,
    ),
    AdviceRule(
        AdviceBucket("cycling", "🚴", "Great for Cycling", "Dry roads and comfortable temperatures.", 3),
        lambda s: s.avg_temperature > DASHBOARD_CYCLING_MIN_TEMP_C
        and s.avg_rainfall < DASHBOARD_CYCLING_MAX_RAINFALL_MM,
    ),
)
DASHBOARD_DEFAULT = AdviceBucket("check_conditions", "⚠️", "Check Conditions", "Mixed conditions. Check closer to the date.", 4)


EVENT_RULES: tuple[AdviceRule, ...] = (
    AdviceRule(
        AdviceBucket(
            "dangerous_heat",
            "🚨",
            "Dangerous heat - Cancel outdoor event",
            "Extreme heat poses health risks. Move indoors or reschedule!",
            0,
        ),
        lambda s: s.avg_temperature > EVENT_DANGEROUS_HEAT_TEMP_C
        or s.extreme_heat_probability > EVENT_DANGEROUS_HEAT_PROB,
    ),
    AdviceRule(
        AdviceBucket(
            "severe_weather",
            "⛈️",
            "Severe weather - Indoor venue required",
            "Heavy rain/storms expected. Outdoor events not safe.",
            1,
        ),
        lambda s: s.heavy_rain_probability > EVENT_SEVERE_RAIN_PROB or s.avg_rainfall > EVENT_SEVERE_RAINFALL_MM,
    ),
    AdviceRule(
        AdviceBucket(
            "dangerous_winds",
            "💨",
            "Dangerous winds - Safety concern",
            "Strong winds pose safety risks. Avoid tents and decorations.",
            2,
        ),
        lambda s: s.avg_wind_speed > EVENT_DANGEROUS_WIND_MS,
    ),
    AdviceRule(
        AdviceBucket(
            "high_rain_risk",
            "🌧️",
            "High rain risk - Covered venue needed",
            "Strong chance of rain. Tents or indoor backup essential.",
            3,
        ),
        lambda s: s.heavy_rain_probability > EVENT_HIGH_RAIN_PROB or s.avg_rainfall > EVENT_HIGH_RAINFALL_MM,
    ),
    AdviceRule(
        AdviceBucket(
            "very_hot",
            "🔥",
            "Very hot - Provide cooling stations",
            "Hot conditions. Shade, water, and cooling areas required.",
            4,
        ),
        lambda s: s.avg_temperature > EVENT_VERY_HOT_TEMP_C or s.extreme_heat_probability > EVENT_VERY_HOT_PROB,
    ),
    AdviceRule(
        AdviceBucket(
            "freezing_cold",
            "🥶",
            "Freezing cold - Heating required",
            "Very cold. Indoor venue or heating systems needed.",
            5,
        ),
        lambda s: s.avg_temperature < EVENT_FREEZING_TEMP_C,
    ),
    AdviceRule(
        AdviceBucket(
            "rain_possible",
            "☔",
            "Rain possible - Have backup plan",
            "Moderate rain chance. Prepare covered areas or indoor option.",
            6,
        ),
        lambda s: s.heavy_rain_probability > EVENT_RAIN_PROB or s.avg_rainfall > EVENT_RAINFALL_MM,
    ),
    AdviceRule(
        AdviceBucket(
            "warm_weather",
            "☀️",
            "Warm weather - Provide shade",
            "Warm conditions. Ensure shade and hydration for guests.",
            7,
        ),
        lambda s: s.avg_temperature > EVENT_WARM_TEMP_C or s.extreme_heat_probability > EVENT_WARM_PROB,
    ),
    AdviceRule(
        AdviceBucket(
            "cold_weather",
            "❄️",
            "Cold weather - Guests need warmth",
            "Chilly conditions. Inform guests to dress warmly.",
            8,
        ),
        lambda s: s.avg_temperature < EVENT_COLD_TEMP_C,
    ),
    AdviceRule(
        AdviceBucket(
            "windy",
            "🌬️",
            "Windy - Secure decorations",
            "Moderate winds. Secure all lightweight items and decorations.",
            9,
        ),
        lambda s: s.avg_wind_speed > EVENT_WINDY_MS,
    ),
    AdviceRule(
        AdviceBucket(
            "very_humid",
            "💧",
            "Very humid - Ensure ventilation",
            "High humidity. Good ventilation and cooling options recommended.",
            10,
        ),
        lambda s: s.avg_humidity > EVENT_HUMID_PCT,
    ),
    AdviceRule(
        AdviceBucket(
            "light_rain_possible",
            "🌦️",
            "Light rain possible - Minor precautions",
            "Small rain chance. Have umbrellas or light cover available.",
            11,
        ),
        lambda s: s.heavy_rain_probability > EVENT_LIGHT_RAIN_PROB or s.avg_rainfall > EVENT_LIGHT_RAINFALL_MM,
    ),
    AdviceRule(
        AdviceBucket(
            "breezy",
            "🍃",
            "Breezy - Secure light items",
            "Light winds. Secure napkins, tablecloths, and light decorations.",
            12,
        ),
        lambda s: s.avg_wind_speed > EVENT_BREEZY_MS,
    ),
    AdviceRule(
        AdviceBucket(
            "great_weather",
            "🌤️",
            "Great weather for events",
            "Warm and comfortable. Excellent for outdoor activities.",
            13,
        ),
        lambda s: EVENT_GREAT_TEMP_RANGE_C[0] < s.avg_temperature <= EVENT_GREAT_TEMP_RANGE_C[1],
    ),
    AdviceRule(
        AdviceBucket(
            "perfect_weather",
            "✨",
            "Perfect event weather!",
            "Ideal conditions. Everything looks great for your outdoor event!",
            14,
        ),
        lambda s: event_suitability_score(s) >= EVENT_PERFECT_SCORE,
    ),
)
EVENT_DEFAULT = AdviceBucket(
    "good_conditions",
    "🌤️",
    "Good conditions overall",
    "Generally favorable weather. Minor adjustments may be needed.",
    15,
)


TRAVEL_RULES: tuple[AdviceRule, ...] = (
    AdviceRule(
        AdviceBucket(
            "hot_climate",
            "🌡️",
            "Hot climate - Pack for heat protection",
            "Very hot conditions. Stay hydrated and avoid midday sun exposure.",
            0,
            ("Light, breathable clothing", "Sunscreen SPF 30+", "Wide-brimmed hat", "Extra water bottles", "Cooling towel"),
        ),
        lambda s: s.avg_temperature > TRAVEL_HOT_TEMP_C or s.extreme_heat_probability > TRAVEL_HOT_PROB,
    ),
    AdviceRule(
        AdviceBucket(
            "rainy_weather",
            "🌧️",
            "Rainy weather - Pack waterproof gear",
            "High chance of rain. Expect transport delays and wet conditions.",
            1,
            ("Waterproof jacket", "Umbrella", "Waterproof bag", "Quick-dry clothing", "Extra socks"),
        ),
        lambda s: s.heavy_rain_probability > TRAVEL_RAIN_PROB or s.avg_rainfall > TRAVEL_RAINFALL_MM,
    ),
    AdviceRule(
        AdviceBucket(
            "cold_weather",
            "❄️",
            "Cold weather - Pack warm clothing",
            "Very cold conditions. Layer clothing and protect extremities.",
            2,
            ("Warm layers", "Waterproof winter jacket", "Gloves", "Warm hat", "Insulated boots"),
        ),
        lambda s: s.avg_temperature < TRAVEL_COLD_TEMP_C,
    ),
    AdviceRule(
        AdviceBucket(
            "very_windy",
            "💨",
            "Very windy - Expect travel delays",
            "Strong winds may affect flights and outdoor activities.",
            3,
            ("Windproof jacket", "Secure hat with strap", "Protective eyewear", "Sturdy footwear"),
        ),
        lambda s: s.avg_wind_speed > TRAVEL_WINDY_MS,
    ),
    AdviceRule(
        AdviceBucket(
            "warm_weather",
            "☀️",
            "Warm weather - Perfect for sightseeing",
            "Great conditions for outdoor activities and exploration.",
            4,
            ("Light summer clothes", "Light jacket for evenings", "Sunscreen", "Comfortable walking shoes"),
        ),
        lambda s: TRAVEL_WARM_TEMP_RANGE_C[0] < s.avg_temperature <= TRAVEL_WARM_TEMP_RANGE_C[1],
    ),
    AdviceRule(
        AdviceBucket(
            "perfect_travel",
            "🌤️",
            "Perfect travel weather!",
            "Ideal conditions for all activities. Comfortable temperatures expected.",
            5,
            ("Comfortable clothing", "Light layers", "Light jacket", "Comfortable shoes"),
        ),
        lambda s: TRAVEL_PERFECT_TEMP_RANGE_C[0] <= s.avg_temperature <= TRAVEL_PERFECT_TEMP_RANGE_C[1],
    ),
)
TRAVEL_DEFAULT = AdviceBucket(
    "moderate_conditions",
    "🌤️",
    "Moderate conditions - Pack versatile items",
    "Variable weather expected. Pack layers for comfort.",
    6,
    ("Layered clothing", "Light jacket", "Comfortable shoes", "Weather-appropriate gear"),
)


ADVICE_TABLES: dict[AdviceContext, tuple[tuple[AdviceRule, ...], AdviceBucket]] = {
    AdviceContext.DASHBOARD: (DASHBOARD_RULES, DASHBOARD_DEFAULT),
    AdviceContext.EVENT: (EVENT_RULES, EVENT_DEFAULT),
    AdviceContext.TRAVEL: (TRAVEL_RULES, TRAVEL_DEFAULT),
}


def classify(summary: WeatherSummary, context: AdviceContext = AdviceContext.EVENT) -> AdviceBucket:
    """Return the first matching bucket, most severe rule first; the context default when none match."""
    rules, default = ADVICE_TABLES[AdviceContext(context)]
    for rule in rules:
        if rule.applies(summary):
            return rule.bucket
    return default


DATE_TYPE_INFO = {
    "current": {"icon": "🌍", "title": "Current Weather", "description": "Real-time conditions and today's forecast"},
    "past": {"icon": "📊", "title": "Historical Data", "description": "Past weather patterns and climate analysis"},
    "future": {"icon": "🔮", "title": "Weather Forecast", "description": "Predicted conditions and planning advice"},
}


def describe_conditions(summary: WeatherSummary, date_type: DateType) -> dict:
    temperature = summary.avg_temperature
    if temperature >= 32 or summary.extreme_heat_probability > 15:
        base = "Very hot and dry"
    elif temperature >= 30:
        base = "Hot weather"
    elif temperature >= 25 and summary.avg_humidity < 50:
        base = "Warm and pleasant"
    elif summary.heavy_rain_probability > 20 or summary.avg_rainfall > 8:
        base = "Rainy conditions"
    elif temperature <= 12:
        base = "Cold weather"
    else:
        base = "Moderate conditions"

    advice = ""
    if date_type == "current":
        if temperature >= 30:
            advice = " - stay hydrated and seek shade!"
        elif summary.heavy_rain_probability > 20:
            advice = " - bring an umbrella today!"
        elif temperature <= 12:
            advice = " - dress warmly!"
        else:
            advice = " - perfect for outdoor activities!"
    elif date_type == "past":
        advice = " - historical climate pattern for this date"
    elif date_type == "future":
        if temperature >= 30:
            advice = " - plan for hot weather, prepare cooling strategies"
        elif summary.heavy_rain_probability > 20:
            advice = " - expect rain, plan indoor alternatives"
        elif temperature <= 12:
            advice = " - prepare warm clothing"
        else:
            advice = " - good conditions expected for outdoor plans"

    info = DATE_TYPE_INFO[date_type]
    return {
        "condition": base,
        "label": f"{info['icon']} {base}{advice}",
        "date_type": date_type,
        "date_type_title": info["title"],
        "date_type_description": info["description"],
    }


def date_specific_advice(summary: WeatherSummary, date_type: DateType) -> dict:
    if date_type == "current":
        return {
            "title": "Today's Action Items",
            "items": [
                "Stay hydrated - drink water regularly"
                if summary.avg_temperature > 25
                else "Comfortable temperature for activities",
                "Carry umbrella or rain gear" if summary.heavy_rain_probability > 20 else "No rain protection needed",
                "Avoid midday sun (11am-3pm)"
                if summary.extreme_heat_probability > 20
                else "Safe for all-day outdoor activities",
                "Check UV index before going out",
            ],
        }
    if date_type == "past":
        return {
            "title": "Historical Climate Insights",
            "items": [
                f"Typical temperature for this date: {summary.avg_temperature:.1f}°C",
                f"Historical rainfall average: {summary.avg_rainfall:.1f}mm",
                f"Climate pattern shows {'higher' if summary.extreme_heat_probability > 15 else 'lower'} heat risk",
                "Use this data for future planning",
            ],
        }
    return {
        "title": "Planning Recommendations",
        "items": [
            "Pack cooling items (fan, cold drinks)"
            if summary.avg_temperature > 25
            else "Standard clothing should be sufficient",
            "Have indoor backup plans ready"
            if summary.heavy_rain_probability > 20
            else "Outdoor activities should proceed as planned",
            "Schedule activities for early morning or evening"
            if summary.extreme_heat_probability > 20
            else "Flexible timing for outdoor plans",
            "Monitor forecast updates as date approaches",
        ],
    }


def travel_tips(summary: WeatherSummary) -> list[str]:
    tips: list[str] = []
    temperature = summary.avg_temperature
    if temperature > 30:
        tips.append("🧳 Pack: Light, breathable clothing, sunscreen, hat, extra water")
    elif temperature < 10:
        tips.append("🧥 Pack: Warm layers, waterproof jacket, gloves, warm footwear")
    elif temperature < 18:
        tips.append("👕 Pack: Light layers, light jacket for evenings")
    else:
        tips.append("👔 Pack: Comfortable clothing, light jacket just in case")

    if summary.heavy_rain_probability > 25 or summary.avg_rainfall > 10:
        tips.append("🚗 Transport: Expect delays, allow extra travel time, roads may be slippery")
        tips.append("☔ Essential: Waterproof gear, umbrella, waterproof bag for electronics")
    elif summary.heavy_rain_probability > 10 or summary.avg_rainfall > 3:
        tips.append("🌦️ Precaution: Pack light rain gear, check transport updates")

    if summary.avg_wind_speed > 20:
        tips.append("✈️ Travel Alert: Flights may be delayed, secure loose items")
    elif summary.avg_wind_speed > 12:
        tips.append("💨 Windy: Secure hats and light items, be cautious near water")

    if summary.avg_humidity > 80:
        tips.append("💧 High Humidity: Pack extra clothes, stay in air-conditioned areas")

    if summary.extreme_heat_probability > 20:
        tips.append("🚨 Safety: Avoid outdoor activities 11am-4pm, seek medical help if dizzy")

    return tips


def wind_strength(speed: float) -> str:
    if speed > WIND_STRONG_THRESHOLD:
        return "strong"
    if speed > WIND_MODERATE_THRESHOLD:
        return "moderate"
    return "light"
