#!/usr/bin/env python3
"""Smoke check script to verify a running service is working."""

import os

import requests

BASE_URL = os.environ.get("FACILITY_ADMIN_URL", "http://localhost:8000")
PROJECT_ID = os.environ.get("FACILITY_ADMIN_PROJECT", "smoke-check")

def check_health():
    """Check health endpoint."""
    print("Checking health endpoint...")
    response = requests.get(f"{BASE_URL}/health")
    print(f"  Status: {response.status_code}")
    print(f"  Response: {response.json()}")
    assert response.status_code == 200
    print("  ✓ Health check passed\n")

def check_api_docs():
    """Check that API docs are accessible."""
    print("Checking API documentation...")
    response = requests.get(f"{BASE_URL}/docs")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 200
    print("  ✓ API docs accessible at /docs\n")

def check_academy_validation():
    """Check that an incomplete academy is rejected."""
    print("Checking academy validation...")
    response = requests.post(
        f"{BASE_URL}/projects/{PROJECT_ID}/academies",
        json={"name": "Smoke Academy", "location": "Field 1"},
    )
    print(f"  Status: {response.status_code}")
    assert response.status_code == 422
    assert response.json()["errors"]["email"] == "Email is required"
    print("  ✓ Validation errors returned\n")

def check_create_academy():
    """Check creating an academy."""
    print("Checking academy creation...")
    academy_data = {
        "name": "Smoke Academy",
        "email": "smoke@example.com",
        "location": "Field 1",
    }

    response = requests.post(f"{BASE_URL}/projects/{PROJECT_ID}/academies", json=academy_data)
    print(f"  Status: {response.status_code}")

    if response.status_code == 201:
        academy = response.json()
        print(f"  Created academy ID: {academy['id']}")
        print(f"  Programs: {academy['programs']}")
        print("  ✓ Academy creation passed\n")
        return academy['id']
    else:
        print(f"  Error: {response.json()}")
        return None

def check_list_academies():
    """Check listing academies."""
    print("Checking academy listing...")
    response = requests.get(f"{BASE_URL}/projects/{PROJECT_ID}/academies", params={"search": "smoke"})
    print(f"  Status: {response.status_code}")
    academies = response.json()
    print(f"  Found {len(academies)} academy(ies)")
    print("  ✓ Academy listing passed\n")
    return academies

def check_delete_academy(academy_id):
    """Remove the academy created by this run."""
    print(f"Deleting academy {academy_id}...")
    response = requests.delete(f"{BASE_URL}/projects/{PROJECT_ID}/academies/{academy_id}")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 204
    print("  ✓ Academy deleted\n")

def check_functions_require_auth():
    """Check that callable functions reject anonymous callers."""
    print("Checking callable functions...")
    response = requests.post(f"{BASE_URL}/functions/validateUserAccess", json={"data": {}})
    print(f"  Status: {response.status_code}")
    assert response.status_code == 401
    print(f"  Error: {response.json()['error']['status']}")
    print("  ✓ Anonymous call rejected\n")

def main():
    """Run all checks."""
    print("=" * 60)
    print("FACILITY ADMIN - SMOKE CHECK")
    print("=" * 60)
    print()

    try:
        # Basic checks
        check_health()
        check_api_docs()

        # Database checks
        check_academy_validation()
        academy_id = check_create_academy()
        check_list_academies()

        if academy_id:
            check_delete_academy(academy_id)

        check_functions_require_auth()

        print("=" * 60)
        print("ALL CHECKS PASSED! ✓")
        print("=" * 60)
        print()

    except requests.exceptions.ConnectionError:
        print("\n❌ ERROR: Could not connect to the API")
        print("   Make sure the server is running:")
        print("   uvicorn facility_admin.main:app --reload")
        print()
    except AssertionError as e:
        print(f"\n❌ CHECK FAILED: {e}")
        print()
    except Exception as e:
        print(f"\n❌ ERROR: {e}")
        print()

if __name__ == "__main__":
    main()
