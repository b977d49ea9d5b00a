"""
Page load test runner
Logs in against the fake backend and requests every page
"""
from pageloads import check_all_routes


def print_results(results):
    """Print pass/fail for each route"""
    print("=" * 80)
    print("PAGE LOAD RESULTS")
    print("=" * 80)
    for route in sorted(results['passed']):
        print(f"  PASS {route}")
    for route in sorted(results['failed']):
        print(f"  FAIL {route}: {results['errors'].get(route)}")
    print(f"TOTAL: {len(results['passed'])} passed, {len(results['failed'])} failed")


def test_all_pages_load(authenticated_client):
    results = check_all_routes(authenticated_client)
    print_results(results)
    assert results['failed'] == [], results['errors']


def test_pages_require_login(client):
    for route in ('/dashboard', '/items/', '/stock/', '/movements/', '/settings/', '/profile/'):
        response = client.get(route)
        assert response.status_code == 302, route
        assert '/login' in response.headers['Location']
