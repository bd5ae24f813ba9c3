import pytest

from docqa.modules.chat.service import documents_from_table_data


@pytest.fixture
def project_with_answers(client, fake_supabase, user_headers):
    project = client.post("/api/v1/projects", json={"name": "Chat"}, headers=user_headers).json()
    fake_supabase.tables["proyectos"][0]["tableData"] = {
        "¿Qué opina del producto?": [
            {"name": "Ana", "respuesta": "Me gusta mucho."},
            {"name": "Luis", "respuesta": "Es caro."},
        ],
    }
    return project


def test_documents_from_table_data():
    documents = documents_from_table_data({
        "q1": [{"name": "Ana", "respuesta": "Sí"}, "texto suelto"],
        "q2": "valor único",
    })

    assert [d.metadata["question"] for d in documents] == ["q1", "q1", "q2"]
    assert documents[0].page_content == 'q1\n{"name": "Ana", "respuesta": "Sí"}'
    assert documents[1].page_content == "q1\ntexto suelto"
    assert documents[2].page_content == "q2\nvalor único"


def test_documents_from_empty_table():
    assert documents_from_table_data(None) == []
    assert documents_from_table_data({}) == []


def test_chat_answers_from_saved_table(client, user_headers, llm_responses, project_with_answers):
    llm_responses[:] = ["A Ana le gusta; Luis lo encuentra caro."]

    response = client.post(
        "/api/v1/chat",
        json={"project_id": project_with_answers["id"], "message": "¿Qué piensan?"},
        headers=user_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"answer": "A Ana le gusta; Luis lo encuentra caro."}


def test_chat_without_saved_answers(client, user_headers):
    project = client.post("/api/v1/projects", json={"name": "Vacío"}, headers=user_headers).json()

    response = client.post(
        "/api/v1/chat",
        json={"project_id": project["id"], "message": "hola"},
        headers=user_headers,
    )

    assert response.status_code == 400


def test_chat_unknown_project(client, user_headers):
    response = client.post(
        "/api/v1/chat",
        json={"project_id": "missing", "message": "hola"},
        headers=user_headers,
    )

    assert response.status_code == 404
