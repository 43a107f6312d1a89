import nox


nox.options.sessions = ('check', 'test')


all_supported_pythons = ('3.11', '3.12', 'pypy3')
newest_python = '3.12'


@nox.session(python=newest_python)
def check(session):
    session.install('.')
    session.install('bandit', 'flake8', 'flake8-docstrings', 'flake8-import-order', 'mypy', 'types-PyYAML')

    session.run('bandit', '--recursive', 'strata/')
    session.run('flake8',
                '--max-line-length', '120',
                '--import-order-style', 'google',
                '--application-import-names', 'strata',
                '--docstring-style', 'sphinx',
                'strata/')
    session.run('mypy', 'strata/')


@nox.session(python=all_supported_pythons)
def test(session):
    session.install('.[test]')

    session.run('coverage', 'run',
                '--branch',
                '--source', 'strata',
                '--module', 'py.test',
                '--strict-markers',
                'tests/')


@nox.session(python=newest_python)
def dist(session):
    session.install('wheel')

    session.run('python', 'setup.py', 'bdist_wheel')
