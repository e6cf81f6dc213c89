"""Tests for the archrisk command line."""
import json

from click.testing import CliRunner

from archrisk.cli import main

from conftest import technical_asset


class TestAnalyzeCommand:
    def test_writes_outputs(self, sample_model_dict, write_model, tmp_path):
        model_path = write_model(sample_model_dict)
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, ["analyze", "-m", str(model_path), "-o", str(out_dir), "--show", "5"])
        assert result.exit_code == 0, result.output
        risks = json.loads((out_dir / "risks.json").read_text(encoding="utf-8"))
        assert "unencrypted-asset@db1" in [r["synthetic_id"] for r in risks]
        assert (out_dir / "stats.json").exists()
        assert (out_dir / "technical-assets.json").exists()

    def test_skip_option(self, sample_model_dict, write_model, tmp_path):
        model_path = write_model(sample_model_dict)
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, [
            "analyze", "-m", str(model_path), "-o", str(out_dir), "--show", "0",
            "--skip-risk-rules", "unencrypted-asset",
        ])
        assert result.exit_code == 0, result.output
        risks = json.loads((out_dir / "risks.json").read_text(encoding="utf-8"))
        assert all(r["category"] != "unencrypted-asset" for r in risks)

    def test_invalid_model_exits_non_zero(self, sample_model_dict, write_model, tmp_path):
        sample_model_dict["technical_assets"]["Service A"] = technical_asset("svc")
        sample_model_dict["technical_assets"]["Service B"] = technical_asset("svc")
        model_path = write_model(sample_model_dict)
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(main, ["analyze", "-m", str(model_path), "-o", str(out_dir)])
        assert result.exit_code == 1
        assert not (out_dir / "risks.json").exists()

    def test_orphaned_tracking(self, sample_model_dict, write_model, tmp_path):
        sample_model_dict["risk_tracking"] = {"some-rule@nonexistent-id": {"status": "accepted"}}
        model_path = write_model(sample_model_dict)
        out_dir = tmp_path / "out"
        runner = CliRunner()

        result = runner.invoke(main, ["analyze", "-m", str(model_path), "-o", str(out_dir)])
        assert result.exit_code == 1

        result = runner.invoke(main, [
            "analyze", "-m", str(model_path), "-o", str(out_dir), "--ignore-orphaned-risk-tracking",
        ])
        assert result.exit_code == 0, result.output

    def test_settings_file(self, sample_model_dict, write_model, tmp_path):
        model_path = write_model(sample_model_dict)
        out_dir = tmp_path / "configured"
        config_path = tmp_path / "settings.json"
        config_path.write_text(json.dumps({
            "model_file": str(model_path),
            "output_dir": str(out_dir),
            "skip_risk_rules": "ldap-injection",
        }), encoding="utf-8")
        result = CliRunner().invoke(main, ["analyze", "--config", str(config_path), "--show", "0"])
        assert result.exit_code == 0, result.output
        risks = json.loads((out_dir / "risks.json").read_text(encoding="utf-8"))
        assert all(r["category"] != "ldap-injection" for r in risks)


class TestInformationalCommands:
    def test_list_risk_rules(self):
        result = CliRunner().invoke(main, ["list-risk-rules"])
        assert result.exit_code == 0
        assert "unencrypted-asset" in result.output

    def test_explain_risk_rule(self):
        result = CliRunner().invoke(main, ["explain-risk-rule", "ldap-injection"])
        assert result.exit_code == 0
        assert "LDAP" in result.output

    def test_explain_unknown_rule(self):
        result = CliRunner().invoke(main, ["explain-risk-rule", "no-such-rule"])
        assert result.exit_code != 0

    def test_list_types(self):
        result = CliRunner().invoke(main, ["list-types"])
        assert result.exit_code == 0
        assert "confidentiality" in result.output

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.4.0" in result.output


class TestSettingsFileErrors:
    def test_non_mapping_settings_is_a_usage_error(self, tmp_path):
        config_path = tmp_path / "settings.yaml"
        config_path.write_text("- not\n- a mapping\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["analyze", "--config", str(config_path)])
        assert result.exit_code == 1
        assert "must contain a mapping" in result.output
        assert not isinstance(result.exception, AttributeError)

    def test_skip_list_from_yaml_list(self, sample_model_dict, write_model, tmp_path):
        model_path = write_model(sample_model_dict)
        out_dir = tmp_path / "out"
        config_path = tmp_path / "settings.yaml"
        config_path.write_text(
            f"model-file: {model_path}\noutput-dir: {out_dir}\n"
            "skip-risk-rules: [ldap-injection, unencrypted-asset]\n",
            encoding="utf-8",
        )
        result = CliRunner().invoke(main, ["analyze", "--config", str(config_path), "--show", "0"])
        assert result.exit_code == 0, result.output
        risks = json.loads((out_dir / "risks.json").read_text(encoding="utf-8"))
        categories = {r["category"] for r in risks}
        assert "ldap-injection" not in categories
        assert "unencrypted-asset" not in categories
