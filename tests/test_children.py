def test_list_children_sorted(client, make_child):
    make_child("Noah")
    make_child("Mia")

    names = [child["name"] for child in client.get("/children").json()]

    assert names == ["Mia", "Noah"]


def test_get_child(client, make_child):
    child = make_child("Mia", age=5, primary_interest="dogs")

    data = client.get(f"/children/{child.id}").json()

    assert data["age"] == 5
    assert data["primary_interest"] == "dogs"


def test_unknown_child(client):
    response = client.get("/children/missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Child not found"
