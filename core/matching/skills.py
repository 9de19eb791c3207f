"""
Keyword-based skill extraction.

Free-form resume or job text is scanned against a curated vocabulary and the
canonical labels found are returned. Matching is case-insensitive.
"""

import re
from typing import Iterable, Optional

SKILL_VOCABULARY: tuple[str, ...] = (
    # Languages
    "Python", "JavaScript", "TypeScript", "Java", "C++", "C#", "Go", "Rust", "PHP",
    "Ruby", "Swift", "Kotlin", "R", "Scala", "Dart", "Perl", "Bash", "Shell", "Groovy",
    # Frontend
    "React", "Vue", "Angular", "Next.js", "Nuxt.js", "Svelte", "HTML", "CSS",
    "Tailwind", "Redux", "GraphQL", "REST", "Bootstrap", "SASS", "LESS",
    "Webpack", "Vite", "jQuery", "Ember", "Backbone",
    # Backend
    "Node.js", "Express", "Django", "Flask", "FastAPI", "Spring Boot", "Spring",
    ".NET", "ASP.NET", "Laravel", "Rails", "NestJS", "Fastify", "Gin", "Echo",
    "Hapi", "Koa",
    # Databases
    "MongoDB", "PostgreSQL", "MySQL", "Redis", "Elasticsearch", "DynamoDB",
    "Cassandra", "SQLite", "Oracle", "MSSQL", "MariaDB", "Firestore", "CouchDB",
    "Neo4j", "InfluxDB",
    # Cloud & DevOps
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "Terraform", "Ansible",
    "Jenkins", "GitHub Actions", "CircleCI", "CI/CD", "Linux", "Nginx", "Apache",
    "Helm", "ArgoCD", "Prometheus", "Grafana", "ELK", "Datadog",
    # Data & ML
    "Machine Learning", "TensorFlow", "PyTorch", "pandas", "NumPy", "Scikit-learn",
    "Data Science", "SQL", "Power BI", "Tableau", "Spark", "Hadoop",
    "Natural Language Processing", "NLP", "Computer Vision", "Deep Learning",
    "LLM", "OpenAI", "Langchain", "Airflow", "dbt", "Looker",
    # Tools & practices
    "Git", "JIRA", "Figma", "Agile", "Scrum", "Microservices", "API",
    "Prisma", "Mongoose", "Stripe", "SendGrid", "Kafka", "RabbitMQ",
    "gRPC", "WebSocket", "OAuth", "JWT", "LDAP",
    # Mobile
    "React Native", "Flutter", "iOS", "Android", "Xamarin", "Ionic",
    # Testing
    "Jest", "Cypress", "Selenium", "Playwright", "Mocha", "JUnit",
    # Other
    "Shopify", "Salesforce", "SAP", "Power Automate",
)

# Labels with spaces or symbols break \b anchoring, so they use substring search
_SUBSTRING_CHARS = (" ", ".", "+", "#")


def _compile(skill: str) -> Optional[re.Pattern]:
    if any(ch in skill for ch in _SUBSTRING_CHARS):
        return None
    return re.compile(rf"\b{re.escape(skill)}\b", re.IGNORECASE)


_MATCHERS: tuple[tuple[str, Optional[re.Pattern]], ...] = tuple(
    (skill, _compile(skill)) for skill in SKILL_VOCABULARY
)


def extract_skills(text: Optional[str]) -> list[str]:
    """
    Extract known skills from free text.

    Args:
        text: Resume, bio or job description text

    Returns:
        Canonical skill labels in vocabulary order, without duplicates
    """
    if not text or not text.strip():
        return []

    lowered = text.lower()
    found: list[str] = []
    for skill, pattern in _MATCHERS:
        if pattern is None:
            hit = skill.lower() in lowered
        else:
            hit = pattern.search(text) is not None
        if hit and skill not in found:
            found.append(skill)
    return found


def merge_skills(*groups: Iterable[str]) -> list[str]:
    """
    Ordered union of skill lists.

    Entries are compared case-insensitively after trimming; the first
    spelling seen is kept.
    """
    merged: list[str] = []
    seen: set[str] = set()
    for group in groups:
        for skill in group or []:
            if not skill or not skill.strip():
                continue
            key = skill.strip().lower()
            if key in seen:
                continue
            seen.add(key)
            merged.append(skill.strip())
    return merged
