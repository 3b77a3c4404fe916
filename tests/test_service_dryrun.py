"""Dry-run end-to-end tests for the service and deployment commands."""

SUBSCRIPTION_ID = "0b1f6471-1bf0-4dda-aec3-111122223333"
# The subscription id is registered as a secret and redacted from output.
BASE_URL = "https://management.core.windows.net/***"


def test_service_create_dry_run(run_cli):
    rc, stdout, _ = run_cli(
        "service", "create",
        "--dns-name", "myvm",
        "--location", "West US",
        "--subscription-id", SUBSCRIPTION_ID,
        "--dry-run",
    )
    assert rc == 0
    assert f"[dry-run] GET {BASE_URL}/locations" in stdout
    assert f"[dry-run] POST {BASE_URL}/services/hostedservices" in stdout
    assert "<ServiceName>myvm</ServiceName>" in stdout
    assert "<Label>bXl2bQ==</Label>" in stdout
    assert "[dry-run] Poll operation dry-run-request-id" in stdout


def test_service_delete_dry_run(run_cli):
    rc, stdout, _ = run_cli(
        "service", "delete",
        "--dns-name", "myvm",
        "--subscription-id", SUBSCRIPTION_ID,
        "--dry-run",
    )
    assert rc == 0
    assert f"[dry-run] DELETE {BASE_URL}/services/hostedservices/myvm" in stdout


def test_service_upload_cert_dry_run(run_cli, pem_cert):
    rc, stdout, _ = run_cli(
        "service", "upload-cert",
        "--dns-name", "myvm",
        "--cert", pem_cert,
        "--subscription-id", SUBSCRIPTION_ID,
        "--dry-run",
    )
    assert rc == 0
    assert f"[dry-run] POST {BASE_URL}/services/hostedservices/myvm/certificates" in stdout
    assert "<CertificateFormat>pfx</CertificateFormat>" in stdout


def test_deployment_show_dry_run(run_cli):
    rc, stdout, _ = run_cli(
        "deployment", "show",
        "--service", "mysvc",
        "--deployment", "mydep",
        "--subscription-id", SUBSCRIPTION_ID,
        "--dry-run",
    )
    assert rc == 0
    assert f"[dry-run] GET {BASE_URL}/services/hostedservices/mysvc/deployments/mydep" in stdout


def test_deployment_delete_dry_run(run_cli):
    rc, stdout, _ = run_cli(
        "deployment", "delete",
        "--service", "mysvc",
        "--deployment", "mydep",
        "--subscription-id", SUBSCRIPTION_ID,
        "--dry-run",
    )
    assert rc == 0
    assert f"[dry-run] DELETE {BASE_URL}/services/hostedservices/mysvc/deployments/mydep" in stdout


def test_config_file_supplies_subscription(run_cli, tmp_path):
    config = tmp_path / "azdock.yaml"
    config.write_text("subscription_id: from-config-file\napi_url: https://management.example.test\n")
    rc, stdout, _ = run_cli(
        "service", "delete",
        "--dns-name", "myvm",
        "--config", str(config),
        "--dry-run",
    )
    assert rc == 0
    assert "[dry-run] DELETE https://management.example.test/***/services/hostedservices/myvm" in stdout


def test_missing_config_file(run_cli, tmp_path):
    rc, stdout, _ = run_cli(
        "service", "delete",
        "--dns-name", "myvm",
        "--config", str(tmp_path / "nope.yaml"),
        "--dry-run",
    )
    assert rc == 1
    assert "not found" in stdout


def test_service_upload_missing_cert(run_cli, tmp_path):
    rc, stdout, stderr = run_cli(
        "service", "upload-cert",
        "--dns-name", "myvm",
        "--cert", str(tmp_path / "missing.pem"),
        "--subscription-id", SUBSCRIPTION_ID,
        "--dry-run",
    )
    assert rc == 1
    assert "Error: Cannot read certificate" in stdout
    assert "Traceback" not in stderr
