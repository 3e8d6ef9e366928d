"""Skill-oriented generators: expansion of listed skills and transferable-skill mapping."""

import logging
import re

from pydantic import BaseModel

from models.schemas.resume import ResumeItem
from models.schemas.suggestion import Suggestion
from services.generators.base import BaseSuggestionGenerator, GenerationContext
from services.prompt_builder import build_transferable_skills_prompt

logger = logging.getLogger(__name__)


class SkillExpansion(BaseModel):
    family: str
    related: list[str]


def _expansion(family: str, *related: str) -> SkillExpansion:
    return SkillExpansion(family=family, related=list(related))


# Keyed by normalized skill name (see _skill_key)
SKILL_EXPANSIONS: dict[str, SkillExpansion] = {
    # Programming languages
    "python": _expansion("Python", "pandas", "NumPy", "scikit-learn", "TensorFlow", "Django", "FastAPI"),
    "javascript": _expansion("JavaScript", "React", "Node.js", "Express", "Vue.js"),
    "typescript": _expansion("TypeScript", "React", "Next.js", "Express", "NestJS"),
    "java": _expansion("Java", "Spring", "Spring Boot", "Maven", "JUnit"),
    "csharp": _expansion("C#", ".NET", "ASP.NET Core", "Entity Framework"),
    "golang": _expansion("Go", "Gin", "gRPC", "Docker"),
    "rust": _expansion("Rust", "Tokio", "Actix", "WebAssembly"),
    # Frontend
    "react": _expansion("React", "Redux", "React Router", "Next.js", "Material-UI"),
    "vue": _expansion("Vue.js", "Vuex", "Vue Router", "Nuxt.js"),
    "angular": _expansion("Angular", "RxJS", "TypeScript", "Angular Material"),
    "nextjs": _expansion("Next.js", "React", "Server Components", "SSR", "SSG"),
    # Backend
    "django": _expansion("Django", "Django REST Framework", "Celery", "PostgreSQL"),
    "spring": _expansion("Spring", "Spring Boot", "Spring Security", "Spring Data"),
    "express": _expansion("Express", "Node.js", "MongoDB", "JWT"),
    "nestjs": _expansion("NestJS", "TypeScript", "Microservices", "TypeORM"),
    "rest": _expansion("REST APIs", "HTTP", "JSON", "API Design"),
    "graphql": _expansion("GraphQL", "Apollo", "GraphQL Schema", "Resolvers"),
    # Databases
    "sql": _expansion("SQL", "PostgreSQL", "MySQL", "Query Optimization"),
    "postgres": _expansion("PostgreSQL", "Indexing", "Replication", "Query Optimization"),
    "mongodb": _expansion("MongoDB", "Mongoose", "Aggregation", "NoSQL Design"),
    "redis": _expansion("Redis", "Caching", "Pub/Sub", "Rate Limiting"),
    # Cloud & DevOps
    "aws": _expansion("AWS", "EC2", "S3", "Lambda", "RDS", "CloudFront"),
    "gcp": _expansion("Google Cloud", "Compute Engine", "Cloud Storage", "BigQuery"),
    "azure": _expansion("Azure", "App Service", "Azure SQL", "Azure DevOps"),
    "docker": _expansion("Docker", "Docker Compose", "Kubernetes", "Container Registries"),
    "kubernetes": _expansion("Kubernetes", "Helm", "Docker", "Microservices"),
    "git": _expansion("Git", "GitHub", "GitLab", "GitHub Actions"),
    # Data & ML
    "machinelearning": _expansion("Machine Learning", "TensorFlow", "PyTorch", "scikit-learn"),
    "datascience": _expansion("Data Science", "Python", "R", "Machine Learning", "Statistics"),
    "tensorflow": _expansion("TensorFlow", "Keras", "Deep Learning", "Computer Vision"),
}

# Alternate spellings -> expansion key
_SKILL_ALIASES = {
    "go": "golang",
    "c#": "csharp",
    "js": "javascript",
    "ts": "typescript",
    "reactjs": "react",
    "vuejs": "vue",
    "postgresql": "postgres",
    "k8s": "kubernetes",
    "ml": "machinelearning",
    "restapis": "rest",
    "restapi": "rest",
    "googlecloud": "gcp",
    "amazonwebservices": "aws",
}


def _skill_key(skill: str) -> str:
    lower = skill.lower().strip()
    if lower in _SKILL_ALIASES:
        return _SKILL_ALIASES[lower]
    compact = re.sub(r"[^a-z0-9]", "", lower)
    return _SKILL_ALIASES.get(compact, compact)


def _mentioned(term: str, text_lower: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(term.lower())}(?!\w)", text_lower) is not None


def expansion_for(skill: str) -> SkillExpansion | None:
    return SKILL_EXPANSIONS.get(_skill_key(skill))


class SkillExpansionGenerator(BaseSuggestionGenerator):
    """Expands bare skill names into their specific tools. Local, no model call."""

    name = "skill_expansion"
    suggestion_types = ("skill_expansion",)

    async def generate(
        self, section: str, items: list[ResumeItem], context: GenerationContext
    ) -> list[Suggestion]:
        job_lower = context.job_text.lower()
        listed = {item.heading.lower() for item in items}
        suggestions = []

        for index, item in enumerate(items):
            skill = item.heading.strip()
            if not skill or "(" in skill:
                continue
            expansion = expansion_for(skill)
            if expansion is None:
                continue

            related = [r for r in expansion.related if r.lower() not in listed]
            if not related:
                continue
            # Related skills the job asks for come first.
            in_job = [r for r in related if _mentioned(r, job_lower)]
            ordered = in_job + [r for r in related if r not in in_job]

            reasoning = f"Naming specific {expansion.family} tools helps ATS keyword matching."
            if in_job:
                reasoning += f" The job mentions {', '.join(in_job)}."
            suggestions.append(
                Suggestion(
                    section=section,
                    item_index=index,
                    original_text=skill,
                    suggested_text=f"{skill} ({', '.join(ordered)})",
                    suggestion_type="skill_expansion",
                    reasoning=reasoning,
                )
            )
        logger.info("skill_expansion: %d of %d skills expandable", len(suggestions), len(items))
        return suggestions


def _item_lines(item: ResumeItem) -> list[str]:
    lines = [line.strip() for line in item.heading.split("\n") if line.strip()]
    return lines + item.bullets


class TransferableSkillsGenerator(BaseSuggestionGenerator):
    """Reframes education and non-tech entries in the job's terminology."""

    name = "transferable_skills"
    suggestion_types = ("skill_mapping",)

    async def generate(
        self, section: str, items: list[ResumeItem], context: GenerationContext
    ) -> list[Suggestion]:
        entries = [" | ".join(_item_lines(item)) for item in items]
        if not any(entries):
            return []

        prompt = build_transferable_skills_prompt(
            entries, context.target_keywords, context.candidate_type
        )
        suggestions = []
        for entry in await self._ask(prompt):
            index = entry.get("index")
            if not isinstance(index, int) or not 0 <= index < len(items):
                continue
            lines = _item_lines(items[index])
            original = str(entry.get("original") or "").strip()
            if original not in lines:
                # Model paraphrased the source line; fall back to the first one.
                original = lines[0] if lines else ""
            suggested = str(entry.get("suggested") or "").strip()
            if not original or not suggested or suggested == original:
                continue

            reasoning = str(entry.get("reasoning", ""))
            mapped = entry.get("mapped_skills")
            if isinstance(mapped, list) and mapped:
                reasoning = f"{reasoning} Skills: {', '.join(map(str, mapped))}.".strip()
            suggestions.append(
                Suggestion(
                    section=section,
                    item_index=index,
                    original_text=original,
                    suggested_text=suggested,
                    suggestion_type="skill_mapping",
                    reasoning=reasoning,
                )
            )
        return suggestions
