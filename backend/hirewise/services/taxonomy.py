"""
Hiring Vocabulary - skills, roles, locations and certifications

Shared by the keyword requirement interpreter and the match assessment
so that "reactjs" in a query and "React" on a profile land on the same
canonical token.

Structure:
    SKILLS_TAXONOMY: category -> canonical skill -> [synonyms]
    ROLE_TITLES: known multi-word titles, checked before the suffix heuristic
    ROLE_SUFFIXES: head nouns that end a job title
    LOCATIONS: cities and regions recognized in free text
    CERTIFICATIONS: certification phrases -> canonical name
"""

import re
from typing import Dict, Iterable, List, Optional

SKILLS_TAXONOMY: Dict[str, Dict[str, List[str]]] = {
    "languages": {
        "python": ["python3", "py"],
        "javascript": ["js", "ecmascript", "es6"],
        "typescript": ["ts"],
        "java": ["j2ee", "jakarta"],
        "csharp": ["c#", ".net", "dotnet"],
        "golang": ["go lang"],
        "php": ["laravel"],
        "sql": ["structured query language"],
    },
    "frontend": {
        "react": ["reactjs", "react.js", "next.js", "nextjs"],
        "angular": ["angularjs"],
        "vue": ["vuejs", "vue.js", "nuxt"],
        "html": ["html5"],
        "css": ["css3", "sass", "scss", "tailwind", "bootstrap"],
    },
    "backend": {
        "django": ["django rest framework", "drf"],
        "flask": [],
        "fastapi": [],
        "spring": ["spring boot", "springboot"],
        "node": ["node.js", "nodejs", "express", "expressjs"],
    },
    "cloud": {
        "aws": ["amazon web services", "ec2", "s3", "lambda"],
        "azure": ["microsoft azure"],
        "gcp": ["google cloud", "google cloud platform", "bigquery"],
        "docker": ["containerization", "dockerfile"],
        "kubernetes": ["k8s", "helm", "kubectl"],
    },
    "data": {
        "postgresql": ["postgres", "psql"],
        "mysql": ["mariadb"],
        "mongodb": ["mongo"],
        "redis": [],
        "machine learning": ["ml", "predictive modeling"],
        "data analysis": ["data analytics", "analytics"],
        "excel": ["ms excel", "advanced excel"],
    },
    "logistics": {
        "gps tracking": ["vehicle tracking", "gps"],
        "fleet management": ["fleet operations"],
        "route optimization": ["route planning"],
        "supply chain": ["supply chain management", "scm"],
        "inventory management": ["inventory control", "stock management"],
        "warehouse management": ["wms", "warehousing"],
        "driver management": ["driver coordination"],
        "fuel management": [],
        "maintenance scheduling": ["vehicle maintenance"],
        "transportation": ["transport operations"],
        "logistics": [],
        "sap": ["sap erp", "sap mm"],
        "erp": [],
        "lifo": [],
        "fifo": [],
        "fefo": [],
        "compliance": ["safety regulations", "dot regulations"],
    },
    "professional": {
        "leadership": ["team leadership", "leading teams"],
        "team management": ["people management", "staff supervision"],
        "communication skills": ["communication"],
        "problem solving": [],
        "organizational skills": ["organisational skills"],
        "stakeholder management": ["stakeholder engagement"],
    },
}

ROLE_TITLES: List[str] = [
    "fleet manager", "truck driver", "logistics coordinator", "warehouse manager",
    "supply chain manager", "transport manager", "operations manager", "delivery manager",
    "fleet supervisor", "logistics executive", "warehouse executive", "transport coordinator",
    "inventory manager", "store manager", "warehouse incharge", "logistics manager",
    "supply chain executive", "procurement manager", "transport executive",
    "transport supervisor", "fleet executive", "operations executive",
    "software engineer", "data scientist", "product manager", "full stack developer",
    "frontend developer", "backend developer", "devops engineer",
]

ROLE_SUFFIXES = (
    "developer", "engineer", "manager", "executive", "coordinator", "supervisor",
    "analyst", "driver", "scientist", "designer", "architect", "consultant",
    "incharge", "lead", "director", "administrator", "officer", "specialist",
)

# Words that may precede a role suffix without being part of the title
ROLE_STOPWORDS = frozenset({
    "a", "an", "the", "for", "as", "of", "we", "are", "is", "hiring", "need",
    "needed", "looking", "seeking", "experienced", "required", "urgent", "our",
    "with", "and", "to", "in", "at", "new", "you", "will", "must", "should", "can",
})

LOCATIONS: List[str] = [
    "delhi", "new delhi", "mumbai", "navi mumbai", "bangalore", "bengaluru", "chennai",
    "kolkata", "pune", "hyderabad", "ahmedabad", "gurgaon", "gurugram", "noida",
    "faridabad", "ghaziabad", "thane", "jaipur", "lucknow", "chandigarh", "indore",
    "bhopal", "patna", "ranchi", "ludhiana", "manesar", "bawal", "dharuhera", "bhiwadi",
    "neemrana", "london", "remote",
]

LOCATION_ALIASES = {
    "bengaluru": "bangalore",
    "gurugram": "gurgaon",
    "new delhi": "delhi",
}

CERTIFICATIONS: Dict[str, str] = {
    "commercial driver license": "commercial driver license",
    "cdl": "commercial driver license",
    "hazmat": "hazmat certification",
    "clean license": "clean driving license",
    "driving license": "driving license",
    "forklift certification": "forklift certification",
    "safety certification": "safety certification",
    "pmp": "pmp",
}


def _word_pattern(phrase: str) -> str:
    # \b does not work next to symbols such as "#" or "."
    left = r"(?<![\w])" if not phrase[0].isalnum() else r"\b"
    right = r"(?![\w])" if not phrase[-1].isalnum() else r"\b"
    return left + re.escape(phrase) + right


def normalize_text(value: Optional[str]) -> str:
    """Lower-case and collapse whitespace."""
    if not value:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip().lower()


_SKILL_LOOKUP: Dict[str, str] = {}
for _skills in SKILLS_TAXONOMY.values():
    for _skill, _synonyms in _skills.items():
        _SKILL_LOOKUP[_skill] = _skill
        for _synonym in _synonyms:
            _SKILL_LOOKUP.setdefault(_synonym, _skill)


def canonical_skill(skill: str) -> str:
    """Map a skill or synonym to its canonical name; unknown skills are kept normalized."""
    token = normalize_text(skill)
    return _SKILL_LOOKUP.get(token, token)


def normalize_skills(skills: Iterable[str]) -> List[str]:
    """Canonicalize, drop empties and de-duplicate preserving order."""
    seen = set()
    result = []
    for skill in skills:
        token = canonical_skill(skill)
        if token and token not in seen:
            seen.add(token)
            result.append(token)
    return result


def extract_skills(text: str) -> List[str]:
    """
    Extract canonical skills from text using taxonomy with synonym matching.

    Returns skills in taxonomy order.
    """
    if not text:
        return []

    text_lower = text.lower()
    found = []
    for skills in SKILLS_TAXONOMY.values():
        for skill, synonyms in skills.items():
            for term in [skill, *synonyms]:
                if re.search(_word_pattern(term), text_lower):
                    found.append(skill)
                    break
    return normalize_skills(found)


def extract_location(text: str) -> Optional[str]:
    """Earliest known location in text; the longer name wins at the same position."""
    text_lower = text.lower()
    best = None
    for location in LOCATIONS:
        match = re.search(_word_pattern(location), text_lower)
        if match is None:
            continue
        key = (match.start(), -len(location))
        if best is None or key < best[0]:
            best = (key, location)
    if best is None:
        return None
    return normalize_location(best[1])


def normalize_location(value: Optional[str]) -> str:
    location = normalize_text(value)
    return LOCATION_ALIASES.get(location, location)


def extract_role(text: str) -> Optional[str]:
    """
    Known title first, then "<up to two words> <role suffix>" within one
    comma/sentence segment.
    """
    text_lower = normalize_text(text)
    for title in ROLE_TITLES:
        if re.search(_word_pattern(title), text_lower):
            return title

    for segment in re.split(r"[,;.\n()|]", text_lower):
        words = re.findall(r"[a-z0-9+#]+", segment)
        for i, word in enumerate(words):
            if word.rstrip("s") not in ROLE_SUFFIXES:
                continue
            prefix = []
            for previous in reversed(words[max(0, i - 2):i]):
                if previous in ROLE_STOPWORDS or previous.isdigit():
                    break
                prefix.insert(0, previous)
            return " ".join(prefix + [word.rstrip("s")])
    return None


def extract_certifications(text: str) -> List[str]:
    text_lower = text.lower()
    found = []
    for phrase, name in CERTIFICATIONS.items():
        if re.search(_word_pattern(phrase), text_lower) and name not in found:
            found.append(name)
    return found
