import os
import sys

# Ensure project root is on sys.path when running via `uv run`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from flerta_v0.core.context import ContextExtractor, FOCUS_MARKER
from flerta_v0.models.schemas import ChatMessage, ConversationContext


extractor = ContextExtractor()


def _messages(n):
    return [
        ChatMessage(role="user" if i % 2 else "match", content=f"mensagem número {i}")
        for i in range(n)
    ]


def test_structured_keeps_last_ten_in_order():
    out = extractor.extract(ConversationContext(messages=_messages(12)))
    lines = out.split("\n")
    assert len(lines) == 10
    assert lines[0] == "Match: mensagem número 2"
    assert lines[-1] == "You: mensagem número 11"


def test_structured_drops_near_empty_entries():
    msgs = [
        ChatMessage(role="match", content="oi"),
        ChatMessage(role="user", content="   ok "),
        ChatMessage(role="match", content=None),
        ChatMessage(role="match", content="Adorei sua foto na praia"),
    ]
    out = extractor.extract(ConversationContext(messages=msgs))
    assert out == "Match: Adorei sua foto na praia"


def test_structured_line_count_never_exceeds_qualifying_messages():
    msgs = [
        ChatMessage(role="user", content="Que dia\nlongo hoje\n\nsério"),
        ChatMessage(role="match", content="abc"),
        ChatMessage(role="match", content="Bora tomar um açaí?"),
    ]
    out = extractor.extract(ConversationContext(messages=msgs))
    assert out.split("\n") == ["You: Que dia longo hoje sério", "Match: Bora tomar um açaí?"]


def test_falls_back_to_ocr_when_messages_are_trivial():
    ctx = ConversationContext(
        messages=[ChatMessage(role="match", content="oi")],
        raw_text="Adorei te conhecer no show. Bora repetir semana que vem",
    )
    assert extractor.extract(ctx) == "Adorei te conhecer no show. Bora repetir semana que vem"


def test_technical_sentence_removed_from_ocr_text():
    text = "Terraform deploy concluído. Oi sumida, como vai? Vamos sair sábado?"
    out = extractor.extract(ConversationContext(raw_text=text))
    assert "Terraform" not in out
    assert "deploy" not in out
    assert out.endswith("Vamos sair sábado")


def test_mostly_technical_text_gets_focus_marker():
    text = "Deploy feito. Docker rodando. Kubernetes ok. Python 3. Adorei o filme ontem!"
    out = extractor.filter_technical(text)
    assert out == f"{FOCUS_MARKER}\nAdorei o filme ontem"


def test_focus_mode_keeps_at_most_five_sentences():
    kept = [f"Frase pessoal número {i}" for i in range(7)]
    noise = ["docker compose up"] * 20
    out = extractor.filter_technical(". ".join(noise + kept))
    body = out.split("\n", 1)[1]
    assert out.startswith(FOCUS_MARKER)
    assert body.split(". ") == kept[:5]


def test_numeric_only_sentences_dropped():
    text = "123 456 789. Que saudade do nosso café. Bora marcar aquele cinema"
    assert extractor.filter_technical(text) == "Que saudade do nosso café. Bora marcar aquele cinema"


def test_strips_odd_characters():
    out = extractor.filter_technical("★★ Oi!! 😍 Adorei te conhecer ontem à noite")
    assert "★" not in out and "😍" not in out
    assert out.endswith("Adorei te conhecer ontem à noite")


def test_empty_input_returns_empty_string():
    assert extractor.extract(ConversationContext()) == ""
    assert extractor.extract(ConversationContext(raw_text="")) == ""
    assert extractor.extract(ConversationContext(messages=[], raw_text="   \n  ")) == ""


def test_loose_dict_messages_do_not_raise():
    out = extractor._render_messages([{"role": "user", "content": 12345}, {"content": None}, object()])
    assert out == "You: 12345"


def test_extract_is_idempotent():
    ctx = ConversationContext(raw_text="Reunião de backend às 10. Que tal um vinho hoje? Conta mais do seu dia")
    assert extractor.extract(ctx) == extractor.extract(ctx)
