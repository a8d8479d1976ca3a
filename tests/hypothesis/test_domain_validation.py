import pytest
from hypothesis import given
from hypothesis import strategies as st
from strategies import domain_names

from sitegraph import InvalidDomainName, validate


@pytest.mark.hypothesis
@given(domain_names())
def test_valid_domain_names_are_accepted(domain_name):
    assert validate({"domainName": domain_name}).domain_name == domain_name


@pytest.mark.hypothesis
@given(domain_names())
def test_www_label_is_rejected(domain_name):
    with pytest.raises(InvalidDomainName):
        validate({"domainName": f"www.{domain_name}"})


@pytest.mark.hypothesis
@given(domain_names(), st.sampled_from(["_", "A", "Z", "!", "/", " ", "*"]), st.data())
def test_invalid_characters_are_rejected(domain_name, character, data):
    position = data.draw(st.integers(min_value=0, max_value=len(domain_name)))
    candidate = domain_name[:position] + character + domain_name[position:]
    with pytest.raises(InvalidDomainName):
        validate({"domainName": candidate})
