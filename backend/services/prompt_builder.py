"""All prompt templates for language-model calls.

User-supplied text is always wrapped in XML-style tags so the model can
tell instructions from content.
"""

# Phrases that read as machine-written on a resume
BANNED_PHRASES = ("spearheaded", "leveraged", "synergized", "utilize", "utilized", "utilizing")


def _numbered(lines: list[str]) -> str:
    return "\n".join(f"{i}. {line}" for i, line in enumerate(lines))


def _keyword_line(keywords: list[str]) -> str:
    return ", ".join(keywords) if keywords else "No specific keywords provided"


def build_keyword_extraction_prompt(job_description: str, max_keywords: int) -> str:
    """Keyword extraction from a job posting."""
    return f"""You are an expert ATS (Applicant Tracking System) analyst.

Extract the {max_keywords} most important keywords a recruiter would screen for
in this job description. Ignore benefits, EEO statements, company boilerplate
and generic words like "team" or "experience".

<job_description>
{job_description}
</job_description>

For each keyword:
- keyword: the term as written in the job description (e.g. "Kubernetes", "AWS")
- category: one of skill, technology, qualification, experience, soft_skill, certification
- importance: "high" for required, "medium" for preferred, "low" for nice to have

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "keywords": [
    {{"keyword": "Python", "category": "technology", "importance": "high"}}
  ]
}}"""


def build_bullet_rewrite_prompt(
    bullets: list[str], keywords: list[str], job_excerpt: str, section: str
) -> str:
    """Bullet rewrites for experience and projects entries."""
    return f"""You are an expert resume writer and ATS optimization specialist.

Rewrite the {section} bullet points below so they read stronger for the target job.

RULES:
- Keep every fact from the original. Do NOT invent tools, skills, employers or numbers.
- Lead with a strong action verb.
- Work in job keywords only where the original already supports them.
- Never use these phrases: {", ".join(BANNED_PHRASES)}
- Aim for 20-35 words per bullet. Plain, natural language.
- Skip bullets that are already strong.

<target_keywords>
{_keyword_line(keywords)}
</target_keywords>

<job_description_excerpt>
{job_excerpt}
</job_description_excerpt>

<bullets>
{_numbered(bullets)}
</bullets>

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "suggestions": [
    {{
      "index": <bullet number from the list>,
      "suggested": "<rewritten bullet>",
      "reasoning": "<what changed and why, one sentence>"
    }}
  ]
}}"""


def build_action_verb_prompt(bullets: list[str], strong_verbs: list[str], weak_verbs: list[str]) -> str:
    """Action verb replacement for bullets that open weakly."""
    return f"""You are an expert resume writer specializing in action verbs.

Each bullet below starts with a weak verb. Replace ONLY the opening verb with a
stronger one that fits the achievement. Keep every other word identical.

Strong verbs to choose from: {", ".join(strong_verbs)}
Weak verbs being replaced: {", ".join(weak_verbs)}
Never use: {", ".join(BANNED_PHRASES)}

<bullets>
{_numbered(bullets)}
</bullets>

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "suggestions": [
    {{
      "index": <bullet number from the list>,
      "suggested": "<the bullet with only the verb changed>",
      "alternatives": ["<verb>", "<verb>"],
      "reasoning": "<why this verb is stronger, one sentence>"
    }}
  ]
}}"""


def build_quantification_prompt(bullets: list[str]) -> str:
    """Metric placeholders for bullets that carry no numbers."""
    return f"""You are an expert resume writer specializing in achievement quantification.

None of the bullets below contain a metric. For each one, show WHERE a metric
belongs using an [X] placeholder that the candidate fills in with real data.

CRITICAL:
- Do NOT invent or estimate numbers. Use [X] only, e.g. "by [X]%" or "for [X] users".
- Add exactly ONE placeholder per bullet.
- Keep the original verb and wording; only insert the metric phrase.

<bullets>
{_numbered(bullets)}
</bullets>

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "suggestions": [
    {{
      "index": <bullet number from the list>,
      "suggested": "<the bullet with an [X] placeholder inserted>",
      "prompt": "<question asking the candidate for their real number>",
      "reasoning": "<which metric would strengthen it, one sentence>"
    }}
  ]
}}"""


def build_transferable_skills_prompt(
    entries: list[str], keywords: list[str], candidate_type: str
) -> str:
    """Map education or non-tech entries onto job-relevant skills."""
    if candidate_type == "career_changer":
        guidance = """For career changers:
- Map operational and business skills to their tech equivalents
- Team leadership -> cross-functional team leadership
- Operations -> systems coordination, process optimization
- Customer service -> user empathy, requirements clarification"""
    else:
        guidance = """For students and early-career candidates:
- Map coursework, TA roles and group projects to professional terminology
- TA experience -> technical mentorship, knowledge transfer
- Group projects -> cross-functional collaboration, requirements gathering
- Research -> data analysis, documentation practices"""

    return f"""You are an expert career coach who reframes experience for technology roles.

{guidance}

<job_keywords>
{_keyword_line(keywords)}
</job_keywords>

<entries>
{_numbered(entries)}
</entries>

For each entry that demonstrates a transferable skill, write a reframed version
of the entry's text that names the skill in terms the job uses. Be honest: do
not claim skills the entry does not demonstrate. Skip entries with nothing to map.

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "suggestions": [
    {{
      "index": <entry number from the list>,
      "original": "<the exact line of the entry being reframed>",
      "suggested": "<reframed line>",
      "mapped_skills": ["<skill>", "<skill>"],
      "reasoning": "<why this mapping is relevant, one sentence>"
    }}
  ]
}}"""


def build_format_review_prompt(resume_text: str, experience_years: float) -> str:
    """Formatting review and removal candidates."""
    return f"""You are an ATS formatting expert reviewing a resume.

The candidate has roughly {experience_years:.0f} years of experience.

Find lines that should be reformatted or removed for ATS compatibility and
professional norms: outdated or irrelevant content, inconsistent date formats,
"References available upon request", objective statements, and similar.

<resume>
{resume_text}
</resume>

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "suggestions": [
    {{
      "type": "format" | "removal",
      "original": "<exact line from the resume>",
      "suggested": "<replacement line, or empty string for removal>",
      "reasoning": "<why, one sentence>"
    }}
  ]
}}"""


def build_judge_prompt(
    original_text: str,
    suggested_text: str,
    jd_excerpt: str,
    section_type: str,
    candidate_type: str | None = None,
) -> str:
    """Rubric-constrained verdict on a single suggestion."""
    job_type_guidance = ""
    if candidate_type == "coop":
        job_type_guidance = """
**Job Type Context:**
- Co-op/Internship: accept "Assisted", "Contributed", "Learned". Do NOT penalize lack of ownership verbs."""
    elif candidate_type:
        job_type_guidance = """
**Job Type Context:**
- Full-time: expect ownership verbs such as "Led", "Delivered", "Owned"."""

    return f"""You are a resume quality assurance expert. You are a VERIFIER, not a content generator.

Evaluate whether the suggested edit meets quality standards.

**Evaluation Criteria (each 0-25 points):**

1. **Authenticity:**
   - 25: pure reframing of existing content
   - 10-15: adds skills or experience not in the original
   - 0-10: clear fabrication
   - Specific metrics (%, $, numbers) NOT in the original -> max 5 points.
     An [X] placeholder is not a fabricated metric.

2. **Clarity:**
   - 25: professional, grammatical, natural
   - 0-10: confusing or obviously machine-written

3. **ATS Relevance:**
   - 25: job keywords incorporated naturally
   - 0-10: no keyword focus

4. **Actionability:**
   - 25: specific, implementable improvement
   - 0-10: vague or generic
{job_type_guidance}

<section_type>
{section_type}
</section_type>

<original_text>
{original_text}
</original_text>

<suggested_text>
{suggested_text}
</suggested_text>

<job_description_excerpt>
{jd_excerpt}
</job_description_excerpt>

Give each criterion a score, then give an overall_score (0-100) reflecting your
holistic judgment of the suggestion. Reasoning must be 1-2 sentences.

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "authenticity": <integer 0-25>,
  "clarity": <integer 0-25>,
  "ats_relevance": <integer 0-25>,
  "actionability": <integer 0-25>,
  "overall_score": <integer 0-100>,
  "reasoning": "<1-2 sentences>"
}}"""
