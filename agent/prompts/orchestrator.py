"""
Prompts for question analysis and the confidence gate.
"""

GUARDRAIL_RESPONSE = (
    "I need a specific question about customer data to help you. "
    "Please ask about customers, their orders, or addresses."
)

ANALYZE_PROMPT_TEMPLATE = """You are an AI assistant that helps analyze database questions.
Given a question about customer data and the database schema, analyze if the question is related to the database and provide a confidence score.

IMPORTANT:
- Analyze if the question is related to customer data, orders, or addresses
- Provide a confidence score from 0 to 1 at the start of your response in the format [CONFIDENCE: X.XX]
- Score 0.0 for completely unrelated questions or greetings
- Score 0.1-0.3 for vague or unclear questions
- Score 0.4-0.7 for somewhat related questions that need clarification
- Score 0.8-1.0 for clear, specific questions about the database

Database schema:
{schema}

Question: {question}

Provide your confidence score and analysis:"""
