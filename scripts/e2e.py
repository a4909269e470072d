#!/usr/bin/env python3
import os
import sys
import textwrap
import httpx


MAX_ATTEMPTS = 3


def generate_with_retry(client: httpx.Client, payload: dict) -> dict:
    """Re-issue generation when every suggestion was blocked, raising the temperature each time."""
    temperature = 0.8
    for attempt in range(1, MAX_ATTEMPTS + 1):
        body = dict(payload, llm_options={"temperature": temperature})
        r = client.post("/suggestions/generate", json=body)
        if r.status_code == 503 and r.json().get("retryable"):
            print(f"  attempt {attempt}: {r.json()['message']} (temperature={temperature:.1f})")
            temperature = min(temperature + 0.2, 1.4)
            continue
        r.raise_for_status()
        return r.json()
    raise AssertionError(f"all {MAX_ATTEMPTS} attempts were blocked as too generic")


def main() -> int:
    base = sys.argv[1] if len(sys.argv) > 1 else os.getenv("BASE_URL", "http://127.0.0.1:8000")
    user_id = os.getenv("E2E_USER", "u_e2e")

    print(f"Base URL: {base}")
    with httpx.Client(base_url=base, timeout=60.0) as client:
        # Health
        r = client.get("/health")
        r.raise_for_status()
        data = r.json()
        assert data.get("status") == "ok", f"Health not ok: {data}"
        print("✓ Health ok")

        # Profile
        profile_payload = {
            "timezone": "America/Sao_Paulo",
            "preferences": {"humor": 70, "subtlety": 40, "boldness": 60, "length": "medium"},
        }
        r = client.put(f"/profiles/{user_id}", json=profile_payload)
        r.raise_for_status()
        print("✓ Profile saved")

        # Conversation from noisy OCR text
        conv_payload = {
            "user_id": user_id,
            "platform": "Tinder",
            "ocr_text": (
                "21:47 ✓✓ Terraform deploy concluído.\n"
                "Adorei as fotos da sua viagem pra Chapada!\n"
                "Qual foi a melhor cachoeira? Vamos sair sábado?"
            ),
        }
        r = client.post("/conversations", json=conv_payload)
        r.raise_for_status()
        conv_id = r.json()["id"]
        print(f"✓ Conversation created (id={conv_id})")

        # Generate
        for coach in (False, True):
            g = generate_with_retry(client, {"conversation_id": conv_id, "coach_mode": coach})
            suggestions = g["suggestions"]
            assert suggestions, "empty suggestion batch"
            assert len(suggestions) <= (3 if coach else 5)
            print(f"✓ Generated {len(suggestions)} suggestions (coach_mode={coach})")
            for s in suggestions:
                print("   -", textwrap.shorten(s["text"], width=120))
                for why in s["reasoning"]:
                    print("       >", why)

        # Feedback
        sid = suggestions[0]["id"]
        r = client.post(f"/suggestions/{sid}/copy")
        r.raise_for_status()
        assert r.json().get("accepted") is True
        r = client.post(f"/suggestions/{sid}/feedback", json={"score": 5})
        r.raise_for_status()
        assert r.json().get("feedback_score") == 5
        print("✓ Copy and feedback recorded")

    print("E2E SUCCESS")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except httpx.HTTPError as e:
        print(f"HTTP error: {e}")
        if isinstance(e, httpx.HTTPStatusError):
            print("Response:", e.response.text)
        raise SystemExit(1)
    except AssertionError as e:
        print("Assertion failed:", e)
        raise SystemExit(1)
