"""
Enriched text builders. The output is a pure function of the inputs, so
identical attributes always embed to identical vectors.
"""

from typing import List


def build_profile_text(natural_key: str, raw_text: str, seniority: str, skills: List[str], industry: str) -> str:
    """Summarize a candidate profile ahead of its raw text."""
    all_skills = ", ".join(skills)
    top_skills = skills[:3]
    either_skill = " or ".join(top_skills)
    bullet_sep = "\n  - "

    return f"""
  Candidate Profile: {natural_key}
  Experience Level: {seniority}
  Core Skills: {all_skills}
  Industry Experience: {industry}

  Summary:
  This candidate is a {seniority} professional specializing in {all_skills}.
  They have a strong background in {industry}, with expertise in {all_skills}.

  Key Qualifications:
  - {bullet_sep.join(top_skills)}
  - Experience working in {industry} industry environments.

  Ideal Job Fit:
  Positions requiring {either_skill}, with a focus on {industry}.

  Resume Content:
  {raw_text}
"""


def build_posting_text(natural_key: str, raw_text: str, seniority: str, required_skills: List[str], industry: str) -> str:
    """Summarize a job posting; the title leads the embedded text."""
    all_skills = ", ".join(required_skills)
    primary_skills = required_skills[:3]
    primary = ", ".join(primary_skills)
    bullet_sep = "\n  - "

    listing = f"""
  JOB LISTING - {natural_key}
  Experience Level: {seniority}
  Industry: {industry}

  Role Overview:
  This role is ideal for a {seniority} candidate with experience in {primary}.
  The ideal candidate should have a strong background in {industry}.

  Required Expertise:
  - {bullet_sep.join(primary_skills)}
  - Background in {industry} projects.

  Best-Fit Candidates:
  Professionals experienced in {all_skills}, ideally within {industry}.

  Job Responsibilities:
  - Utilize {primary} for day-to-day tasks.
  - Work closely with cross-functional teams in the {industry} space.

  KEYWORDS: {natural_key}, {industry}, {all_skills}, {seniority}

  Job Description:
  {raw_text}
"""
    return f"{natural_key} {listing}"
