"""
Prompt templates for legal drafting features.

Templates use ``str.format`` fields; literal JSON braces are doubled.
"""

TRUNCATION_MARKER = "... (truncated)"


def truncate_context(text: str, budget: int) -> str:
    """Cut ``text`` to at most ``budget`` characters, marking the cut."""
    if budget <= 0:
        raise ValueError("budget must be > 0")
    if len(text) <= budget:
        return text
    return text[:budget] + TRUNCATION_MARKER


ARGUMENTS_PROMPT = """Act as a highly experienced lawyer. Based on the following case description/facts, generate a comprehensive list of legal arguments FOR and AGAINST the primary party involved.

Case Description:
{case_description}

Format the response exactly as a JSON object with two keys: "argumentsFor" and "argumentsAgainst".
Each key should contain a markdown string with bullet points of the arguments.

Example format:
{{
  "argumentsFor": "- Argument 1\\n- Argument 2",
  "argumentsAgainst": "- Counter-argument 1\\n- Counter-argument 2"
}}
"""

LEGAL_FLOW_PROMPT = """Analyze the following legal case facts or text and break it down into a logical flowchart.

Return ONLY a JSON object with this structure:
{{
  "nodes": [
    {{ "id": "1", "label": "Event A" }},
    {{ "id": "2", "label": "Legal Consequence B" }}
  ],
  "edges": [
    {{ "id": "e1-2", "source": "1", "target": "2" }}
  ]
}}

Rules:
1. Nodes should represent key events, facts, or legal questions.
2. Edges should represent causality or logical flow.
3. Keep labels concise (max 5-7 words).
4. Create a linear or branching flow as appropriate.

Text to Analyze:
{text}
"""

LAW_COMPARISON_PROMPT = """Analyze the following legal concept/event: "{node_label}"

1. Identify relevant laws/statutes in {source_country} (Domestic).
2. Identify equivalent laws/statutes in {target_country} (Foreign).
3. Provide a brief reasoning comparing the two.

Return ONLY a JSON object:
{{
  "domestic": ["Section X of Act Y"],
  "foreign": ["Section A of Act B"],
  "reasoning": "Brief comparison..."
}}
"""

DRAFT_REVIEW_PROMPT = """Act as a senior legal editor. Review the following legal draft and provide a detailed critique.

DRAFT TEXT:
{draft_text}

Provide your analysis in the following JSON format:
{{
  "grammar": "List any grammar, spelling, or punctuation errors found, or state 'No errors found'.",
  "clarity": "Assess the clarity, tone, and readability. Is it professional? Is it too legalese?",
  "risks": "Identify potential legal risks, ambiguities, or missing standard clauses.",
  "suggestions": "Provide specific suggestions for improvement."
}}

Ensure the response is valid JSON.
"""

DRAFTING_PROMPT = """You are a senior legal associate. Your task is to draft a legal document based on the user's request.

CRITICAL INSTRUCTIONS:
1. CITATIONS: You must STRICTLY follow the Bluebook citation format for all case law, statutes, and regulations.
2. TONE: Use formal, precise legal language. Avoid conversational filler.
3. FORMATTING: Use clear headings, numbered lists, and proper paragraph structure.
4. ACCURACY: If you cite a case, ensure it is real. If you are unsure about a specific case, mark it as [VERIFY CITATION].

User Request: {request}
"""

LEGAL_MEMO_PROMPT = """Act as a senior legal associate. Write a formal Legal Memorandum based on the following details:

TO: {to}
FROM: {sender}
DATE: {date}
SUBJECT: {subject}

FACTS:
{facts}

LEGAL ISSUE/QUESTION PRESENTED:
{issue}

Please structure the response strictly as a formal Legal Memo with the following sections:
1. QUESTION PRESENTED
2. BRIEF ANSWER
3. STATEMENT OF FACTS
4. DISCUSSION
5. CONCLUSION

Use professional legal tone.

CRITICAL CITATION RULES:
1. STRICTLY follow The Bluebook: A Uniform System of Citation.
2. Cite relevant CASE LAW and STATUTES to support every legal argument.
3. Format citations correctly (e.g., *Miranda v. Arizona*, 384 U.S. 436 (1966)).
4. If a specific jurisdiction is not provided, cite general common law principles or famous precedent, but note the jurisdiction.
"""

DOCUMENT_CHAT_PROMPT = """Context from PDF document ({file_name}):
{document_text}

User Question: {question}"""
