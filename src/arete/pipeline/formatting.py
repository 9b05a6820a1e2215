"""Pure text-structuring helpers that turn free-text answers into resume content."""

from __future__ import annotations

import re

ACTION_VERBS = (
    "Implemented",
    "Developed",
    "Built",
    "Created",
    "Designed",
    "Led",
    "Managed",
    "Optimized",
    "Used",
    "Maintained",
)

MIN_BULLET_SENTENCE = 15
MAX_BULLET_LENGTH = 100

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_ACTION_VERB_RE = re.compile(rf"^(?:{'|'.join(ACTION_VERBS)})\b", re.IGNORECASE)
_FILLER_RE = re.compile(r"^(?:I did this|This was at|While working at)", re.IGNORECASE)
_DATA_RE = re.compile(r"database|data|storage|index", re.IGNORECASE)
_PRODUCT_RE = re.compile(r"app|application|system|platform", re.IGNORECASE)

_COMPANY_SUFFIX_RE = re.compile(
    r"[\s,]+(?:inc|llc|l\.l\.c|corp|corporation|co|ltd|limited|solutions|gmbh)\.?$",
    re.IGNORECASE,
)

# Names that double as everyday English words only match when capitalized.
TECH_PATTERNS = [
    # Databases
    re.compile(
        r"(?<!\w)(SQL|NoSQL|MongoDB|PostgreSQL|MySQL|Redis|(?-i:Oracle)|Cassandra)(?!\w)",
        re.IGNORECASE,
    ),
    # Frameworks
    re.compile(
        r"(?<!\w)(React|Angular|Vue|Svelte|Next\.?js|Node\.?js|(?-i:Express)|Django|Flask|FastAPI"
        r"|Laravel|(?-i:Spring)|(?-i:Rails))(?!\w)",
        re.IGNORECASE,
    ),
    # Cloud / DevOps
    re.compile(r"(?<!\w)(Docker|Kubernetes|AWS|Azure|GCP|Terraform|Jenkins|Git|CI/CD)(?!\w)", re.IGNORECASE),
    # Languages
    re.compile(
        r"(?<!\w)(Python|JavaScript|TypeScript|Java|C#|C\+\+|(?-i:Go)|(?-i:Rust)|Ruby|PHP"
        r"|(?-i:Swift)|Kotlin)(?![\w#+])",
        re.IGNORECASE,
    ),
    # Vector search
    re.compile(
        r"(?<!\w)(Pinecone|Weaviate|Qdrant|Milvus|Faiss|Elasticsearch|Vector\s*Database)(?!\w)",
        re.IGNORECASE,
    ),
    # ML / AI
    re.compile(
        r"(?<!\w)(Machine Learning|Deep Learning|NLP|Computer Vision|AI|LLM|GPT|Transformers)(?!\w)",
        re.IGNORECASE,
    ),
]


def split_sentences(text: str) -> list[str]:
    """Split on runs of . ! ? and drop empty fragments."""
    if not text:
        return []
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def choose_action_verb(sentence: str) -> str:
    """Pick a leading verb for a sentence that does not start with one."""
    if _DATA_RE.search(sentence):
        return "Implemented"
    if _PRODUCT_RE.search(sentence):
        return "Developed"
    return "Built"


def format_experience_bullets(response: str) -> list[str]:
    """Turn a free-text answer into achievement bullets.

    Sentences shorter than 15 characters or starting with filler phrases are
    dropped. Each bullet opens with an action verb and absorbs following
    sentences until it passes 100 characters. Every bullet is capitalized
    and ends with a period.
    """
    sentences = split_sentences(response)
    bullets: list[str] = []
    current = ""

    for i, sentence in enumerate(sentences):
        if len(sentence) < MIN_BULLET_SENTENCE or _FILLER_RE.match(sentence):
            continue

        if not current:
            if _ACTION_VERB_RE.match(sentence):
                current = sentence
            else:
                current = f"{choose_action_verb(sentence)} {_lower_first(sentence)}"
        else:
            current += f", {_lower_first(sentence)}"

        if len(current) > MAX_BULLET_LENGTH or i == len(sentences) - 1:
            bullets.append(current)
            current = ""

    if current:
        bullets.append(current)

    if not bullets and len(response.strip()) > 20:
        words = response.split()[:10]
        bullets.append(f"Implemented {' '.join(words)}...")

    result = []
    for bullet in bullets:
        bullet = _upper_first(bullet)
        result.append(bullet if bullet.endswith(".") else f"{bullet}.")
    return result


def extract_technical_skills(text: str) -> list[str]:
    """Find known technology names in ``text``, in order of first appearance."""
    if not text:
        return []
    found: list[tuple[int, str]] = []
    seen: set[str] = set()
    for pattern in TECH_PATTERNS:
        for match in pattern.finditer(text):
            skill = match.group(1)
            key = skill.lower()
            if key in seen:
                continue
            seen.add(key)
            found.append((match.start(), skill))
    return [skill for _, skill in sorted(found)]


def extract_soft_skills(text: str) -> list[str]:
    """Split on commas and periods, keeping phrases of 11-49 characters.

    Falls back to the whole trimmed answer when no phrase qualifies.
    """
    if not text or not text.strip():
        return []
    phrases = [p.strip() for p in re.split(r"[,.]", text)]
    skills = [p for p in phrases if 10 < len(p) < 50]
    return skills or [text.strip()]


def format_summary_paragraph(response: str, current_summary: str | None) -> str:
    """Fold an answer into the career summary.

    Without a summary, the first two sentences of the answer become one.
    A short summary (two sentences or fewer) gets the answer's first
    sentence appended; a longer one gets it spliced in after its first
    sentence.
    """
    if not current_summary:
        sentences = split_sentences(response)
        if not sentences:
            return response
        summary = ". ".join(sentences[:2])
        return summary if summary.endswith(".") else f"{summary}."

    sentences = split_sentences(response)
    first = sentences[0] if sentences else ""
    if len(first) < MIN_BULLET_SENTENCE:
        return current_summary

    parts = current_summary.split(". ")
    if len(parts) <= 2:
        return f"{current_summary} {first}."

    summary = ". ".join([parts[0], first, *parts[1:]])
    return summary if summary.endswith(".") else f"{summary}."


def company_base_name(company: str) -> str:
    """Strip a trailing legal suffix: "Acme Corp" -> "Acme"."""
    name = company.strip()
    base = _COMPANY_SUFFIX_RE.sub("", name).strip()
    return base or name


def find_company_index(response: str, experience: list | None) -> int | None:
    """Index of the first experience entry whose company the answer mentions.

    Matching is case-insensitive and ignores legal suffixes on either side.
    """
    if not response or not isinstance(experience, list):
        return None
    for index, entry in enumerate(experience):
        if not isinstance(entry, dict):
            continue
        company = entry.get("company")
        if not isinstance(company, str) or not company.strip():
            continue
        tokens = company_base_name(company).split()
        pattern = r"(?<!\w)" + r"\s+".join(re.escape(t) for t in tokens) + r"(?!\w)"
        if re.search(pattern, response, re.IGNORECASE):
            return index
    return None
