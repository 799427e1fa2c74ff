SYSTEM_PROMPT = (
    "You are an expert exam question setter for Nigerian computer-based tests. "
    "You reply with a single valid JSON object and nothing else."
)

_EXAMPLE = """{
  "questions": [
    {
      "question": "What is the SI unit of force?",
      "options": ["Joule", "Newton", "Watt", "Pascal"],
      "answer": 1,
      "explanation": "Force is measured in newtons; one newton accelerates one kilogram at one metre per second squared."
    }
  ]
}"""


def build_prompt(exam: str, subject: str, count: int) -> str:
    return f"""
Generate EXACTLY {count} CBT (Computer-Based Test) questions for the Nigerian exam "{exam}" on the subject "{subject}".

Return a single valid JSON object with a key "questions" whose value is an array of {count} question objects.
Each question object MUST have these keys:
- "question": the question text (string)
- "options": an array of exactly 4 answer choices (strings), with no "A)"/"B)" labels
- "answer": the zero-based index (integer 0, 1, 2 or 3) of the correct choice in "options"
- "explanation": a brief explanation of why the answer is correct (string)

EXAMPLE (one question, showing the format only):
{_EXAMPLE}

RULES:
- Exactly one correct choice per question
- "answer" is an integer, never a letter
- No text or markdown formatting outside the JSON object
"""
