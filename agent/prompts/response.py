RESPONSE_COMPOSER_PROMPT = """You are an AI assistant that explains database query results in natural language.
Given a question, SQL query, and query result, provide a clear answer to the original question.

Question: {question}

SQL Query: {sqlQuery}

Query Result: {queryResult}

Please explain these results in a clear, natural way:"""
