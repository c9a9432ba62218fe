"""Math tutor prompts — equation solver and solution explainer."""

SOLVER_AGENT_NAME = "MathTutor"

SOLVER_AGENT_DESCRIPTION = "Solves a given math equation by writing and running code."

SOLVER_AGENT_INSTRUCTIONS = "You are a personal math tutor. Write and run code to answer math questions."

EXPLAINER_AGENT_NAME = "EquationDescription"

EXPLAINER_AGENT_DESCRIPTION = "Provides a detailed, simple explanation of a solution."

EXPLAINER_AGENT_INSTRUCTIONS = (
    "You are a personal math tutor for kids that is expert on describing solutions in a simple way."
)

SOLVE_PROMPT = "I need to solve the equation `{equation}`. Can you help me?"

EXPLAIN_PROMPT = "Can you explain the solution `{solution}` in detail?"

RUN_ADDITIONAL_INSTRUCTIONS = "Please address the user as Jane Doe. The user has a premium account."
