"""Authentication command handlers."""

import httpx

from ..config import delete_token, save_token
from ..dashboard import Dashboard


def _logged_in(dashboard: Dashboard, data: dict):
    save_token(data["access_token"])
    dashboard.client.token = data["access_token"]
    dashboard.reset()
    dashboard.load()


def register_user(dashboard: Dashboard):
    """Handle user registration and auto-login."""
    print("\n=== User Registration ===")
    email = input("Email: ").strip()
    name = input("Name: ").strip()

    if not email or not name:
        print("Error: Email and name are required.\n")
        return

    try:
        data = dashboard.client.register(email, name)
    except httpx.ConnectError:
        print("Error: Could not connect to API server.")
        print("Please start the server with: python -m api.server\n")
        return
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 400:
            print(f"Error: {e.response.json().get('detail', 'Registration failed')}\n")
        else:
            print("Error: Registration failed.\n")
        return
    except httpx.HTTPError as e:
        print(f"Error: API request failed: {e}\n")
        return

    _logged_in(dashboard, data)
    user = data["user"]
    print("\n✓ Registration successful! You are now logged in.")
    print(f"  Email: {user['email']}")
    print(f"  Name: {user['name']}\n")


def login_user(dashboard: Dashboard):
    """Handle user login."""
    print("\n=== User Login ===")
    email = input("Email: ").strip()

    if not email:
        print("Error: Email is required.\n")
        return

    try:
        data = dashboard.client.login(email)
    except httpx.ConnectError:
        print("Error: Could not connect to API server.")
        print("Please start the server with: python -m api.server\n")
        return
    except httpx.HTTPStatusError as e:
        if e.response.status_code in (400, 401):
            print("Error: Invalid credentials. User not found.\n")
        else:
            print("Error: Login failed.\n")
        return
    except httpx.HTTPError as e:
        print(f"Error: API request failed: {e}\n")
        return

    _logged_in(dashboard, data)
    print("\n✓ Login successful!")
    print(f"  Welcome back, {data['user']['name']}!\n")


def logout_user(dashboard: Dashboard):
    """Handle user logout."""
    delete_token()
    dashboard.client.token = None
    dashboard.reset()
    print("\n✓ Logged out successfully.\n")
