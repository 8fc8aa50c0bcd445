# python vasedesign.py --config config.json --params vase_params.json --variants 5
import argparse
import os
import sys
from vase_params import VaseParameters, DEFAULT_PARAMETERS, ImportDecodeError, parameters_from_json
from vase_pipeline import VasePipeline


def load_base_parameters(params_path: str) -> VaseParameters:

    if params_path and os.path.exists(params_path):
        with open(params_path, 'r') as f:
            return parameters_from_json(f.read()).validate()

    return DEFAULT_PARAMETERS


def main(argv=None):
    parser = argparse.ArgumentParser(description='Parametric vase mesh generator')
    parser.add_argument('--config', default='config.json', help='Configuration file path')
    parser.add_argument('--params', help='Vase parameters JSON file')
    parser.add_argument('--name', default='vase', help='Base name of the exported STL files')
    parser.add_argument('--variants', type=int, help='Number of randomised variants to export')
    parser.add_argument('--seed', type=int, help='Noise and randomisation seed')
    parser.add_argument('--ascii', action='store_true', help='Write ASCII STL instead of binary')
    parser.add_argument('--dry-run', action='store_true', help='Validate setup without generating')

    args = parser.parse_args(argv)

    try:
        base_params = load_base_parameters(args.params)
        print(f"✅ Base parameters loaded")

        pipeline = VasePipeline(args.config)
        if args.seed is not None:
            pipeline.config['noise_seed'] = args.seed
            pipeline.generator.seed = args.seed
        if args.ascii:
            pipeline.config['stl_ascii'] = True

        if args.dry_run:
            print("🧪 Dry run completed successfully")
            return 0

        results = pipeline.run_batch(base_params, variant_count=args.variants, name=args.name)

        print("\n" + "="*60)
        print("🏺 VASE GENERATION COMPLETE!")
        print("="*60)
        print(f"📊 Designs Generated: {results['designs_generated']}")
        print(f"📁 Output Directory: {results['output_dir']}")
        for path in results['stl_files']:
            print(f"💾 {path}")

        return 0

    except ImportDecodeError as e:
        print(f"💥 Could not read parameters: {str(e)}")
        return 1
    except Exception as e:
        print(f"💥 Generation failed: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
