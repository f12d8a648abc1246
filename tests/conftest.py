import os

# Tests never reach the real model and must not be throttled
os.environ.pop("OPENAI_API_KEY", None)
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest


BIOLOGY_TEXT = (
    "The cell membrane controls which molecules enter and leave the cell. "
    "The cell nucleus stores genetic material in the form of chromosomes. "
    "Chromosomes contain long molecules of DNA wrapped around histone proteins. "
    "Ribosomes read messenger RNA and assemble proteins from amino acids. "
    "Mitochondria produce energy for the cell through aerobic respiration. "
    "Chloroplasts capture light energy and store it as glucose in plant cells. "
    "Plant cells also have a rigid cell wall made of cellulose fibres. "
    "The Golgi apparatus packages proteins into vesicles for transport. "
    "Lysosomes contain digestive enzymes that break down worn out organelles. "
    "Enzymes are proteins that speed up chemical reactions inside the cell."
)

THREE_FACTS = (
    "Photosynthesis converts sunlight into chemical energy inside chloroplasts. "
    "Mitochondria release stored energy through cellular respiration in animal cells. "
    "Ribosomes assemble proteins from amino acids using messenger templates."
)


@pytest.fixture
def biology_text():
    return BIOLOGY_TEXT


@pytest.fixture
def three_facts():
    return THREE_FACTS
