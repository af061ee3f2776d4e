SYMPTOMS = (
    "Fatigue",
    "Stress",
    "Sleep Issues",
    "Digestive Problems",
    "Joint Pain",
    "Headaches",
    "Anxiety",
    "Weight Management",
    "Chronic Pain",
    "Allergies",
    "High Blood Pressure",
    "Diabetes",
)

LIFESTYLE_FACTORS = (
    "Sedentary Work",
    "Regular Exercise",
    "Balanced Diet",
    "Smoking",
    "High Stress",
    "Poor Sleep",
    "Travel Frequently",
    "Irregular Meals",
    "Alcohol Consumption",
    "Limited Physical Activity",
    "Irregular Work Hours",
    "High Screen Time",
)

HEALTH_GOALS = (
    "Improve Overall Health",
    "Increase Energy Levels",
    "Better Stress Management",
    "Weight Loss",
    "Better Sleep Quality",
    "Preventive Care",
    "Chronic Condition Management",
    "Mental Health Support",
    "Family Health Planning",
    "Executive Health Program",
    "Luxury Wellness Experience",
    "Global Healthcare Access",
)

EXERCISE_FREQUENCIES = ("Never", "1-2 times/week", "3-4 times/week", "5+ times/week")
SLEEP_QUALITIES = ("Poor", "Fair", "Good", "Excellent")
LEVELS = ("Low", "Moderate", "High", "Very High")
MOOD_STABILITIES = ("Very Stable", "Stable", "Somewhat Unstable", "Unstable")

TAG_VOCABULARIES = {
    "symptoms": SYMPTOMS,
    "lifestyle_factors": LIFESTYLE_FACTORS,
    "goals": HEALTH_GOALS,
}

# Allowed answers per enumerated field; "" means unanswered.
ANSWER_DOMAINS = {
    "exercise_frequency": EXERCISE_FREQUENCIES,
    "sleep_quality": SLEEP_QUALITIES,
    "energy_level": LEVELS,
    "stress_level": LEVELS,
    "mood_stability": MOOD_STABILITIES,
    "anxiety_level": LEVELS,
}


def in_vocabulary_order(tags, vocabulary) -> list:
    """Sort a tag set the way the vocabulary lists it; unknown tags go last."""
    position = {tag: i for i, tag in enumerate(vocabulary)}
    return sorted(tags, key=lambda t: (position.get(t, len(vocabulary)), t))
