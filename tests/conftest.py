"""
Shared sample artifacts.

GOOD_LOGIC scores 100/100 once assembled into STRUCTURE: every subcheck
passes and every bug-pattern signature it contains carries its guard.
"""
import os
from datetime import datetime, timezone

import pytest

# Console logging only while testing.
os.environ.setdefault("LOG_DIR", "")

from game_qa.assembler.template_assembler import assemble
from game_qa.core.constants import MARKER_A, MARKER_B


STRUCTURE_HEAD = """\
<!DOCTYPE html>
<html>
<head><title>Tilt Paddle</title></head>
<body>
<div id="session-code"></div>
<span id="score"></span><span id="lives"></span>
<canvas id="game" width="400" height="400"></canvas>
<script src="/js/SessionSDK.js"></script>
<script>
"""

STRUCTURE_TAIL = """\
gameLoop();
</script>
</body>
</html>
"""

STRUCTURE = (
    STRUCTURE_HEAD
    + MARKER_A + "\n"
    + "    // placeholder logic\n"
    + MARKER_B + "\n"
    + STRUCTURE_TAIL
)

GOOD_LOGIC = """\
let gameState = 'waiting';
let gameStarted = false;
let gameOver = false;
let score = 0;
let lives = 3;
let timeLeft = 60;
const paddle = { x: 0, y: 380, width: 80 };
const ball = { x: 0, y: 0, dx: 0, dy: 0, radius: 6 };

const sdk = new SessionSDK({ gameId: 'tilt-paddle', gameType: 'solo' });

sdk.on('connected', () => { console.log('connected'); });

sdk.on('session-created', (event) => {
    const session = event.detail || event;
    document.getElementById('session-code').textContent = session.sessionCode;
    generateQRCode(session.sessionCode);
});

sdk.on('sensor-data', (event) => {
    const data = event.detail || event;
    processSensorData(data);
});

function processSensorData(data) {
    const tilt = data.data.orientation.gamma;
    paddle.x = Math.max(0, Math.min(320, paddle.x + tilt));
}

function update() {
    if (gameOver) return;
    if (!gameStarted) {
        ball.x = paddle.x + paddle.width / 2;
        ball.y = paddle.y - ball.radius;
        return;
    }
    ball.x += ball.dx;
    ball.y += ball.dy;
    if (ball.dy > 0 && ball.y >= paddle.y) {
        ball.dy *= -1;
    }
    if (lives <= 0) {
        gameOver = true;
    }
}

function render() {}

function updateUI() {
    document.getElementById('score').textContent = score;
    document.getElementById('lives').textContent = lives;
}

setInterval(() => {
    if (gameStarted && !gameOver) {
        timeLeft--;
        if (timeLeft <= 0) {
            gameOver = true;
        }
        updateUI();
    }
}, 1000);

function gameLoop() {
    update();
    render();
    requestAnimationFrame(gameLoop);
}
"""

# Scores well under 60: wrong session alias, no timer decrement, no loop.
BROKEN_LOGIC = """\
const sdk = new SessionSDK({ gameId: 'tilt-paddle' });
sdk.on('session-created', (session) => {
    document.getElementById('session-code').textContent = session.code;
});
let timeLeft = 60;
setInterval(() => {}, 1000);
"""

FIXED_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def structure() -> str:
    return STRUCTURE


@pytest.fixture
def good_logic() -> str:
    return GOOD_LOGIC


@pytest.fixture
def good_game() -> str:
    return assemble(STRUCTURE, GOOD_LOGIC)


@pytest.fixture
def broken_game() -> str:
    return assemble(STRUCTURE, BROKEN_LOGIC)


@pytest.fixture
def fixed_time() -> datetime:
    return FIXED_TIME


@pytest.fixture
def broken_logic() -> str:
    return BROKEN_LOGIC
