import pytest

from pyquiz import create_app


SUSPICIOUS_SUBMISSION = '''class GradeBook:
    def __init__(self, scores):
        self.scores = scores

    def passing(self, limit):
        return sorted(filter(lambda s: s >= limit, self.scores))

    def report(self):
        try:
            best = max(self.scores)
            worst = min(self.scores)
            print(f"Best: {best}, worst: {worst}")
            print(f"Passing: {self.passing(60)}")
        except ValueError:
            print("No scores recorded")
        finally:
            print("Report complete")


book = GradeBook([55, 72, 91, 64, 38, 80])
book.report()
print(", ".join(str(s) for s in sorted(book.scores, reverse=True)))
'''


@pytest.fixture()
def suspicious_code():
    return SUSPICIOUS_SUBMISSION


@pytest.fixture()
def app():
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SUSPICION_PROFILE': 'standard',
    })
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()
