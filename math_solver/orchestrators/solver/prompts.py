SOLVE_PROMPT = """You are a mathematical expert. Solve this math problem step by step and provide a clear, structured response.

Problem: "{problem}"

Please provide your response in this EXACT format:
OPERATION: [the mathematical operation needed - examples: derivative, integral, simplify, factor, solve, find_zeros]
EXPRESSION: [the clean mathematical expression being worked with]
RESULT: [the final answer - for derivatives, provide the derivative expression like "2x + 3"]
STEPS: [detailed step-by-step solution with numbered steps]

Important guidelines:
- For derivatives: Show the derivative as an algebraic expression (e.g., "2x + 3", not just a number)
- For integration: Include the constant of integration (+C)
- For factoring: Show the factored form clearly
- For simplification: Show the simplified expression
- For finding zeros/roots: List all solutions
- Always show your work step by step with clear explanations
- Use proper mathematical notation

Example for derivative of x^2 + 3x + 2:
OPERATION: derivative
EXPRESSION: x^2 + 3x + 2
RESULT: 2x + 3
STEPS:
1. Apply power rule to x^2: derivative is 2x^1 = 2x
2. Apply power rule to 3x: derivative is 3(1)x^0 = 3
3. Derivative of constant 2 is 0
4. Combine terms: 2x + 3 + 0 = 2x + 3

Now solve the given problem following this format exactly."""

EXPLANATION_PROMPT = """Create a clear, educational explanation for this mathematical solution:

Problem: {problem}
Operation: {operation}
Mathematical Expression: {expression}
Final Result: {result}
Solution Steps: {steps}

Provide a friendly, conversational explanation that:
1. Identifies what type of mathematical problem this is
2. Explains the approach used to solve it
3. Clarifies why the answer is correct
4. Mentions any key mathematical concepts or rules involved
5. Uses clear, educational language suitable for students

Keep the explanation concise but informative, around 3-4 sentences."""

FALLBACK_PROMPT = """Solve this math problem clearly and concisely: {problem}

Provide the solution in a clear format with:
1. The final answer
2. Brief explanation of how you got there

Problem: {problem}"""
