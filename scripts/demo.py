#!/usr/bin/env python3
"""
Profile/posting matching demo.

Seeds sample profiles and postings, then prints the best matches in both
directions with a rating label.
"""

import argparse

from jobmatch.core.match_engine import MatchEngine

PROFILES = [
    (
        "resume-perfect-match-1",
        "Senior software engineer with 8+ years of full-stack development experience, specializing in "
        "TypeScript, React, Node.js, and AWS. Led development of scalable web applications serving millions "
        "of users. Strong expertise in CI/CD pipelines, clean architecture, and performance optimization.",
        "Senior",
        ["TypeScript", "React", "Node.js", "AWS", "CI/CD", "Full-Stack Development"],
        "Technology",
    ),
    (
        "resume-perfect-match-2",
        "Machine learning engineer with PhD in Computer Science and 5+ years of industry experience in "
        "natural language processing and transformer models. Expert in Python, PyTorch, TensorFlow, and "
        "deploying ML models to production.",
        "Senior",
        ["Machine Learning", "NLP", "Python", "PyTorch", "TensorFlow", "Transformers", "LLMs"],
        "Artificial Intelligence",
    ),
    (
        "resume-101",
        "Software engineer experienced in TypeScript, React, and Node.js. Built several web applications and REST APIs.",
        "Mid-level",
        ["TypeScript", "React", "Node.js", "REST APIs"],
        "Technology",
    ),
    (
        "resume-102",
        "Machine learning engineer skilled in NLP, deep learning, and model deployment. Experience with Python and TensorFlow.",
        "Mid-level",
        ["Machine Learning", "NLP", "Python", "TensorFlow"],
        "Technology",
    ),
    (
        "resume-103",
        "Graphic designer with a passion for creating stunning visuals. Expert in Adobe Creative Suite.",
        "Mid-level",
        ["Graphic Design", "Photoshop", "Illustrator", "UI Design"],
        "Design",
    ),
    (
        "resume-104",
        "Marketing specialist with expertise in digital marketing strategies, SEO, and content creation.",
        "Mid-level",
        ["Digital Marketing", "SEO", "Content Creation", "Social Media"],
        "Marketing",
    ),
    (
        "resume-105",
        "Pastry chef with no experience in creating gourmet desserts and pastries. Doesn't know anything about "
        "French patisserie techniques, chocolate tempering, and sugar art. Doesn't know anything about pastry, "
        "culinary arts, desserts or pastries.",
        "No Experience",
        [],
        "Culinary Arts",
    ),
]

POSTINGS = [
    (
        "job-perfect-match-1",
        "We are hiring a Senior Full-Stack Software Engineer with 8+ years of experience in scalable web "
        "application development. Must be an expert in TypeScript, React, Node.js, AWS, and CI/CD pipelines.",
        "Senior",
        ["TypeScript", "React", "Node.js", "AWS", "CI/CD", "Full-Stack Development"],
        "Technology",
    ),
    (
        "job-perfect-match-2",
        "Looking for a machine learning engineer with advanced degree in Computer Science and 5+ years of "
        "industry experience in natural language processing and transformer models. Required skills: Python, "
        "PyTorch, TensorFlow.",
        "Senior",
        ["Machine Learning", "NLP", "Python", "PyTorch", "TensorFlow", "Transformers", "LLMs"],
        "Artificial Intelligence",
    ),
    (
        "job-201",
        "Looking for a full-stack software engineer with React and Node.js experience. Must be comfortable "
        "with TypeScript and building REST APIs.",
        "Mid-level",
        ["React", "Node.js", "TypeScript", "REST APIs"],
        "Technology",
    ),
    (
        "job-202",
        "Seeking a machine learning engineer for NLP projects. Experience with Python and TensorFlow required.",
        "Mid-level",
        ["NLP", "Machine Learning", "Python", "TensorFlow"],
        "Technology",
    ),
    (
        "job-203",
        "Hiring a creative graphic designer to join our design team. Must be proficient in Adobe Creative Suite.",
        "Mid-level",
        ["Photoshop", "Illustrator", "UI Design"],
        "Design",
    ),
    (
        "job-204",
        "Looking for a marketing specialist to enhance our digital presence through SEO and content creation.",
        "Mid-level",
        ["SEO", "Content Creation", "Social Media"],
        "Marketing",
    ),
    (
        "job-205",
        "We are hiring a pastry chef with 10+ years of experience in creating gourmet desserts and pastries. "
        "Must be an expert in French patisserie techniques, chocolate tempering, and sugar art. Must have led a "
        "team of pastry chefs in a Michelin-starred restaurant. Strong focus on flavor balance, presentation, "
        "and innovative dessert creation. We value creativity and candidates who can mentor junior pastry chefs.",
        "Senior",
        ["Pastry", "Desserts", "Chocolate Tempering", "Sugar Art", "French Patisserie"],
        "Culinary Arts",
    ),
]


def rating(similarity: float) -> str:
    if similarity >= 0.9:
        return "PERFECT MATCH"
    if similarity >= 0.75:
        return "EXCELLENT MATCH"
    if similarity >= 0.6:
        return "GOOD MATCH"
    if similarity >= 0.5:
        return "POSSIBLE MATCH"
    if similarity >= 0.4:
        return "WEAK MATCH"
    return "NO MATCH"


def print_matches(label: str, natural_key: str, results):
    if not results:
        print(f"❌ No matches found for {natural_key} ({label})")
        return

    print(f"\n✅ Matches for {natural_key} ({label}):")
    for position, match in enumerate(results, start=1):
        print(f"  {position}. {match.natural_key} (Similarity: {match.similarity * 100:.2f}%) - {rating(match.similarity)}")


def main():
    parser = argparse.ArgumentParser(description="Seed sample data and print profile/posting matches")
    parser.add_argument("--db-path", default=":memory:", help="Database path (default: in-memory)")
    parser.add_argument("--limit", type=int, default=3, help="Matches per query")
    args = parser.parse_args()

    with MatchEngine.from_config(args.db_path) as engine:
        engine.clear_profiles()
        engine.clear_postings()

        print("\n🔹 Step 1: Adding profiles...")
        for profile in PROFILES:
            engine.upsert_profile(*profile)

        print("\n🔹 Step 2: Adding postings...")
        for posting in POSTINGS:
            engine.upsert_posting(*posting)

        print("\n🔹 Step 3: Matching...")
        for natural_key, *_ in PROFILES:
            print_matches("profile", natural_key, engine.find_matching_postings(natural_key, args.limit))
        for natural_key, *_ in POSTINGS:
            print_matches("posting", natural_key, engine.find_matching_profiles(natural_key, args.limit))

    print("\n🎯 Demo complete!")


if __name__ == "__main__":
    main()
