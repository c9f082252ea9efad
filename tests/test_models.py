"""Tests for the payload models."""

import pytest
from pydantic import ValidationError

from smtp_module.models import MailFields, MailRequest, ModuleConfig


class TestModuleConfig:
    def test_host_only(self):
        config = ModuleConfig.model_validate({"host": "smtp.example.com"})
        assert config.host == "smtp.example.com"
        assert config.auth is None

    def test_with_auth(self):
        config = ModuleConfig.model_validate({"host": "smtp.example.com:587", "auth": ["u", "p"]})
        assert config.auth == ["u", "p"]

    def test_auth_arity_is_left_to_configuration_handling(self):
        config = ModuleConfig.model_validate({"host": "h", "auth": ["only-user"]})
        assert config.auth == ["only-user"]

    def test_host_is_required(self):
        with pytest.raises(ValidationError):
            ModuleConfig.model_validate({"auth": ["u", "p"]})

    def test_wrong_types_are_rejected(self):
        with pytest.raises(ValidationError):
            ModuleConfig.model_validate({"host": 25})
        with pytest.raises(ValidationError):
            ModuleConfig.model_validate({"host": "h", "auth": "u:p"})

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ValidationError):
            ModuleConfig.model_validate({"host": "h", "port": 25})


class TestMailRequest:
    def test_nested_mail_object(self):
        request = MailRequest.model_validate(
            {
                "to": ["a@x.com"],
                "mail": {"subject": "hi", "from": "me@x.com", "plain": "body", "cc": ["c@x.com"]},
            }
        )
        assert request.to == ["a@x.com"]
        assert request.mail.subject == "hi"
        assert request.mail.from_addr == "me@x.com"
        assert request.mail.cc == ["c@x.com"]
        assert request.mail.html is None

    def test_omitted_and_empty_subject_are_distinct(self):
        omitted = MailFields.model_validate({})
        empty = MailFields.model_validate({"subject": ""})
        assert omitted.subject is None
        assert empty.subject == ""

    def test_missing_fields_default(self):
        request = MailRequest.model_validate({})
        assert request.to == []
        assert request.mail is None

    def test_duplicate_recipients_are_dropped(self):
        request = MailRequest.model_validate({"to": ["b@x.com", "a@x.com", "b@x.com"]})
        assert request.to == ["b@x.com", "a@x.com"]

    def test_flattened_shape_is_rejected(self):
        with pytest.raises(ValidationError):
            MailRequest.model_validate({"to": ["a@x.com"], "subject": "hi"})

    def test_recipient_must_be_strings(self):
        with pytest.raises(ValidationError):
            MailRequest.model_validate({"to": "a@x.com"})
        with pytest.raises(ValidationError):
            MailRequest.model_validate({"to": [1, 2]})
