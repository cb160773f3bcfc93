"""
Keyword rules used as the offline stand-in for the generation service.

When no OPENAI_API_KEY is configured, llm_wrapper answers with the conditions
these rules match, serialized as a JSON array of strings.
"""
import re

SYNONYMS = {
    "throwing up": "vomiting",
    "throw up": "vomiting",
    "belly ache": "abdominal pain",
    "stomach ache": "abdominal pain",
    "tummy ache": "abdominal pain",
    "feverish": "fever",
    "breathless": "shortness of breath",
    "light headed": "lightheaded",
    "runny nose": "congestion",
    "stuffy nose": "congestion",
    "soar throat": "sore throat",
    "feaver": "fever",
    "temprature": "temperature",
    "tired": "fatigue",
    "exhausted": "fatigue",
}

RULES = {
    "fever": ["Influenza", "Viral infection"],
    "sore throat": ["Pharyngitis", "Common cold"],
    "congestion": ["Common cold", "Allergic rhinitis"],
    "vomiting": ["Food poisoning", "Gastroenteritis"],
    "abdominal pain": ["Gastroenteritis", "Indigestion"],
    "cough": ["Common cold", "Bronchitis"],
    "headache": ["Migraine", "Tension headache"],
    "lightheaded": ["Dehydration", "Low blood pressure"],
    "fatigue": ["Anemia", "Sleep deprivation"],
    "rash": ["Contact dermatitis", "Allergic reaction"],
}


def normalize_text(text):
    text = text.lower()
    for k, v in SYNONYMS.items():
        text = text.replace(k, v)
    text = re.sub(r"[^a-z\s]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def infer_conditions(symptom_text):
    """Condition names whose keywords appear in the text, first match first, no repeats."""
    text = normalize_text(symptom_text)
    results = []
    for key, conditions in RULES.items():
        if key in text:
            for cond in conditions:
                if cond not in results:
                    results.append(cond)
    return results
