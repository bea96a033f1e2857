def test_index_only_returns_welcome_message(client, customer, headers):
    response = client.get("/?show_header=true", headers=headers(customer))

    assert response.status_code == 200
    assert response.get_json() == {"message": "Welcome to the Orderhub API"}
