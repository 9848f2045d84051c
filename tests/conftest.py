import pytest
import uuid
from decimal import Decimal

from pos_backend import create_app, database
from pos_backend.database import get_session
from pos_backend.models import AppUser, Product, Category, Supplier


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(autouse=True)
def schema(app):
    """Fresh tables for every test."""
    database.drop_schema()
    database.create_schema()
    yield
    database.get_session().remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session():
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def is_postgres(app):
    return database.engine.dialect.name == 'postgresql'


def _make_user(session, role):
    suffix = str(uuid.uuid4())[:8]
    user = AppUser(username=f'{role}-{suffix}', full_name=f'Usuario {role.title()}', role=role, active=True)
    session.add(user)
    session.commit()
    return user.id


@pytest.fixture(scope='function')
def cashier(session):
    """Id of a user with the 'ventas' role."""
    return _make_user(session, 'ventas')


@pytest.fixture(scope='function')
def admin(session):
    """Id of a user with the 'admin' role."""
    return _make_user(session, 'admin')


@pytest.fixture(scope='function')
def category(session):
    category = Category(name='Herramientas')
    session.add(category)
    session.commit()
    return category.id


@pytest.fixture(scope='function')
def supplier(session):
    supplier = Supplier(name='Truper', phone='555-0100')
    session.add(supplier)
    session.commit()
    return supplier.id


@pytest.fixture(scope='function')
def make_product(session):
    """Factory: make_product(stock=5, sale_price='10.00', ...) -> product id."""
    def factory(stock=10, sale_price='10.00', purchase_price='6.00', active=True, **fields):
        suffix = str(uuid.uuid4())[:8]
        product = Product(
            code=fields.pop('code', f'COD-{suffix}'),
            description=fields.pop('description', f'Producto {suffix}'),
            stock_qty=stock,
            sale_price=Decimal(sale_price),
            purchase_price=Decimal(purchase_price),
            active=active,
            **fields
        )
        session.add(product)
        session.commit()
        return product.id
    return factory


@pytest.fixture(scope='function')
def stock_of(session):
    """Re-read a product's committed stock."""
    def reader(product_id):
        session.expire_all()
        return session.get(Product, product_id).stock_qty
    return reader


def _login(client, user_id):
    with client.session_transaction() as sess:
        sess['user_id'] = user_id
    return client


@pytest.fixture(scope='function')
def cashier_client(client, cashier):
    """Client logged in as a cashier."""
    return _login(client, cashier)


@pytest.fixture(scope='function')
def admin_client(client, admin):
    """Client logged in as an administrator."""
    return _login(client, admin)
