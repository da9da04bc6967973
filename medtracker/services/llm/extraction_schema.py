# medtracker/services/llm/extraction_schema.py

_NUM = {"type": "number"}
_STR = {"type": "string"}

TIMING_PHASE_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "orderInSequence": _NUM,
        "doseAmount": _NUM,
        "doseUnit": _STR,
        "frequency": {"type": "integer"},
        "frequencyMax": {"type": "integer"},
        "period": _NUM,
        "periodMax": _NUM,
        "periodUnit": {"type": "string", "description": "hour, day, week, month"},
        # omit duration for the open-ended (last) phase
        "duration": _NUM,
        "durationUnit": _STR,
        "count": _NUM,
        "isAsNeeded": {"type": "boolean"},
        "specificTimes": {"type": "array", "items": {"type": "string", "description": "HH:MM 24-hour"}},
        "timeCategories": {"type": "array", "items": _STR},
        "weekdays": {
            "type": "array",
            "items": {
                "type": "string",
                "enum": ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"],
            },
        },
        "rawText": _STR,
    },
    "required": ["isAsNeeded"],
}

MEDICATION_DATA_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "medicationStatements": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "medication": _STR,
                    "brandName": _STR,
                    "genericName": _STR,
                    "rxnormCode": _STR,
                    "form": _STR,
                    "strength": {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {"amount": _NUM, "unit": _STR},
                        "required": ["amount", "unit"],
                    },
                    "timingSequence": {"type": "array", "items": TIMING_PHASE_SCHEMA},
                    "sourceText": _STR,
                },
                "required": ["medication", "rxnormCode", "strength", "timingSequence", "sourceText"],
            },
        },
        "freeTextResponse": _STR,
    },
    "required": ["medicationStatements", "freeTextResponse"],
}
