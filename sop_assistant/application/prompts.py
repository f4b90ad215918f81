"""Prompt templates, kept in one place so they can be tuned without code search."""

from __future__ import annotations

from collections.abc import Sequence

from sop_assistant.domain.models import Acronym, RetrievalResult

SYSTEM_PROMPT = """You are an expert SOP (Standard Operating Procedure) assistant. Your goal is to provide accurate, actionable answers based strictly on the provided documentation.

CRITICAL INSTRUCTIONS:
1. DOCUMENTATION ONLY: Answer ONLY using the provided "SOP CONTEXT". Do not use outside knowledge or make assumptions.
2. ACCURACY IS PARAMOUNT: If the answer is not in the context, state: "This information is not available in the current SOPs."
3. USE ACRONYMS: Refer to the "ACRONYM REFERENCE" to understand abbreviations. When using an acronym for the first time, write it out, e.g. "NEFT (National Electronic Funds Transfer)".
4. STRUCTURED ANSWERS:
   - For processes/steps: use numbered lists (1., 2., 3.).
   - For lists of items: use bullet points.
   - For direct questions: answer directly and concisely.
5. NO HALLUCINATIONS: Do not invent steps or policy details."""

NO_INFO_RESPONSE = "This information is not available in the current SOPs."
INDEX_EMPTY_RESPONSE = "SOP index is empty. Please rebuild the index from the admin dashboard."
NO_RESULTS_RESPONSE = "No relevant SOPs found for this question."
BACKEND_DOWN_RESPONSE = (
    "Unable to connect to the embedding or generation service. "
    "Please ensure the model backend and vector index are running."
)
GENERIC_ERROR_RESPONSE = "An error occurred while querying SOPs. Please try again."

CONTEXT_SEPARATOR = "\n\n---\n\n"
SELF_ASSESSMENT_CONTEXT_CHARS = 500
SELF_ASSESSMENT_ANSWER_CHARS = 300


def format_sop_context(results: Sequence[RetrievalResult]) -> str:
    blocks = []
    for r in results:
        title = r.metadata.title or "SOP Entry"
        blocks.append(f"[{title}]\n{r.content}")
    return CONTEXT_SEPARATOR.join(blocks)


def format_acronyms(acronyms: Sequence[Acronym]) -> str:
    if not acronyms:
        return "No acronyms loaded."
    return "\n".join(f"- {a.abbreviation}: {a.full_form}" for a in acronyms)


def build_answer_prompt(acronym_context: str, sop_context: str, question: str) -> str:
    return f"""<|im_start|>system
{SYSTEM_PROMPT}
<|im_end|>
<|im_start|>user
=== ACRONYM REFERENCE ===
{acronym_context or "No acronyms loaded."}

=== SOP CONTEXT ===
{sop_context}

=== QUESTION ===
{question}

Provide your answer based ONLY on the context above:
<|im_end|>
<|im_start|>assistant
"""


def build_confidence_prompt(question: str, answer: str, context: str) -> str:
    return f"""<|im_start|>system
You evaluate answer quality. Rate from 0.0 to 1.0 only.
<|im_end|>
<|im_start|>user
Question: {question}
Context: {context[:SELF_ASSESSMENT_CONTEXT_CHARS]}...
Answer: {answer[:SELF_ASSESSMENT_ANSWER_CHARS]}

Rate confidence (0.0-1.0). Consider: Does the context support the answer? Is it complete?
Reply with ONLY a number:
<|im_end|>
<|im_start|>assistant
"""


def build_question_generation_prompt(file_name: str, category: str | None, sample: str) -> str:
    return f"""You are generating predefined questions for a Standard Operating Procedures document. These questions MUST be answerable with >80% confidence.

Document: {file_name}
Category: {category or "General"}

Document Content:
{sample}

CRITICAL REQUIREMENTS:
1. Questions must target SPECIFIC, CONCRETE procedures mentioned in the document
2. Questions must use EXACT terminology from the document
3. Questions must be answerable with step-by-step procedures from the document
4. Avoid vague or general questions

Generate 8-12 specific questions.

Good examples:
- "What is the process for handling SIP orders in the system?"
- "Who is responsible for validating client KYC documents?"

Bad examples:
- "What is the procedure?" (not specific)
- "How do I handle transactions?" (too broad)

Return ONLY a JSON array of question strings, nothing else."""
