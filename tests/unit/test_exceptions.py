from mirrorql.exceptions import InvalidArgumentError, InvalidClauseError, InvalidRangeError, MirrorQLError


def test_exception_hierarchy():
    """Test exception classes inherit correctly."""
    assert issubclass(InvalidArgumentError, MirrorQLError)
    assert issubclass(InvalidClauseError, MirrorQLError)
    assert issubclass(InvalidRangeError, InvalidArgumentError)
    assert not issubclass(InvalidClauseError, InvalidArgumentError)


def test_exception_instantiation():
    """Test exceptions can be instantiated with messages."""
    exc = InvalidRangeError("Timestamp range must have gt (or gte) and lt (or lte)")
    assert str(exc) == "Timestamp range must have gt (or gte) and lt (or lte)"
    assert exc.messages == ("Timestamp range must have gt (or gte) and lt (or lte)",)
    assert exc.params == ()
    assert isinstance(exc, Exception)


def test_default_messages():
    assert str(InvalidArgumentError()) == "Invalid argument."
    assert str(InvalidClauseError()) == "Invalid clause produced by fragment builder."
    assert repr(InvalidClauseError("bad")) == "InvalidClauseError - bad"


def test_for_params():
    exc = InvalidArgumentError.for_params(["account.id", "timestamp"])
    assert exc.params == ("account.id", "timestamp")
    assert exc.messages == ("Invalid parameter: account.id", "Invalid parameter: timestamp")
    assert str(exc) == "Invalid parameter: account.id; Invalid parameter: timestamp"

    single = InvalidArgumentError.for_params("limit")
    assert single.params == ("limit",)
    assert str(single) == "Invalid parameter: limit"


def test_for_unknown_params():
    exc = InvalidArgumentError.for_unknown_params("name")
    assert exc.params == ("name",)
    assert str(exc) == "Unknown query parameter: name"


def test_exception_chaining():
    """Test exceptions support chaining with 'from'."""
    try:
        try:
            raise ValueError("Original error")
        except ValueError as e:
            raise InvalidArgumentError.for_params("limit") from e
    except InvalidArgumentError as exc:
        assert exc.__cause__ is not None
        assert isinstance(exc.__cause__, ValueError)
