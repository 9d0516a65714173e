"""
LLM Prompts
===========
Centralised store for the repair system prompt and user prompt builder.

Prompt Design Rules:
    - "Fix only the reported problems" — hard constraint in every prompt
    - "Preserve existing logic" — keep everything that already works
    - "Return the complete program" — the orchestrator replaces the whole
      artifact, so a partial answer would lose code
    - The answer must be wrapped in a ```html fence so it can be extracted

Retry Awareness:
    - Attempts after the first carry a note that the previous rewrite did
      not clear the listed problems.
"""
from typing import Sequence

SYSTEM_PROMPT = (
    "You are an expert at fixing bugs in browser sensor games.\n"
    "\n"
    "HARD RULES — you MUST follow ALL of these:\n"
    "1. Fix ONLY the reported problems.\n"
    "2. Preserve the existing game logic as much as possible.\n"
    "3. Use the verified patterns shown in the request.\n"
    "4. Return the COMPLETE HTML document, never a fragment or a diff.\n"
    "5. Wrap the document in a single ```html code block. No other text."
)


KNOWN_DEFECT_EXAMPLES = """\
1. Ball stuck to the paddle:
```javascript
// wrong
} else {
    ball.x = paddle.x + paddle.width/2;
    ball.y = paddle.y - ball.radius;
}

// right
if (!gameStarted) {
    ball.x = paddle.x + paddle.width/2;
    ball.y = paddle.y - ball.radius;
    ball.dx = 0;
    ball.dy = 0;
} else {
    ball.x += ball.dx;
    ball.y += ball.dy;
}
```

2. Timer never counts down:
```javascript
// wrong
setInterval(() => {
    timeLeft--;  // decremented without any condition
}, 1000);

// right
setInterval(() => {
    if (gameStarted && !gameOver) {
        timeLeft--;
        if (timeLeft <= 0) {
            gameOver = true;
        }
        updateUI();
    }
}, 1000);
```

3. session.code instead of session.sessionCode:
```javascript
// wrong
document.getElementById('session-code').textContent = session.code;

// right
document.getElementById('session-code').textContent = session.sessionCode;
```"""


def format_issue_list(issue_descriptions: Sequence[str]) -> str:
    """Number each description; continuation lines are indented under it."""
    blocks = []
    for index, description in enumerate(issue_descriptions, start=1):
        first, *rest = description.splitlines() or [""]
        lines = [f"{index}. {first}"]
        lines.extend(f"   {line}" for line in rest)
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def build_repair_prompt(
    artifact: str,
    issue_descriptions: Sequence[str],
    attempt_number: int = 1,
) -> str:
    """
    Build the user prompt for one repair attempt.

    Parameters
    ----------
    artifact : str
        Complete current program text.
    issue_descriptions : sequence of str
        One description per failing check.
    attempt_number : int
        1-based attempt number.

    Returns
    -------
    str
        The user prompt.
    """
    sections = [
        "## Current problems",
        format_issue_list(issue_descriptions) or "(none listed)",
    ]

    if attempt_number > 1:
        sections += [
            "",
            f"## Note (attempt {attempt_number})",
            "The previous rewrite did not clear these problems. "
            "Check each one again before answering.",
        ]

    sections += [
        "",
        "## Known defect patterns",
        KNOWN_DEFECT_EXAMPLES,
        "",
        "## Current HTML",
        "```html",
        artifact,
        "```",
        "",
        "## Request",
        "Return the complete fixed HTML document in a ```html code block.",
    ]
    return "\n".join(sections)
